# =============================================================================
# Length-prefixed text protocol codec
#
#   get-req  = "G" klen SP kcontent
#   set-req  = "S" klen SP vlen SP kcontent vcontent
#   del-req  = "D" klen SP kcontent
#   response = value | error
#   value    = vlen SP vcontent
#   error    = "-" SP elen SP econtent
#
# All lengths are decimal ASCII byte counts of the UTF-8 encoded content, so
# keys and values may hold spaces, newlines or any other byte.
# =============================================================================

from collections import namedtuple

from kvbench.errors import ProtocolError, UnknownOperation

# --- Operation Names ---
GET = "get"
SET = "set"
DEL = "del"
MISS = "miss"

# --- Wire Tags ---
TAG_GET = b"G"
TAG_SET = b"S"
TAG_DEL = b"D"
ERR_MARKER = "-"
SEP = b" "

# payload is the raw bytes; is_error is set when the server sent "- <len> <bytes>"
Response = namedtuple("Response", ["payload", "is_error"])


def _to_bytes(data):
    if isinstance(data, bytes):
        return data
    return str(data).encode("utf-8")


# --- Encoding ---

def _encode_keyed(tag, key):
    k = _to_bytes(key)
    return tag + str(len(k)).encode("ascii") + SEP + k


def encode_get(key):
    return _encode_keyed(TAG_GET, key)


def encode_del(key):
    return _encode_keyed(TAG_DEL, key)


def encode_set(key, value):
    """No separator between key and value content; the two lengths split them."""
    k = _to_bytes(key)
    v = _to_bytes(value)
    return b"".join([
        TAG_SET,
        str(len(k)).encode("ascii"), SEP,
        str(len(v)).encode("ascii"), SEP,
        k, v,
    ])


def encode_request(request):
    """Encodes a request by its operation name. Raises UnknownOperation otherwise."""
    if request.op == GET:
        return encode_get(request.key)
    if request.op == SET:
        return encode_set(request.key, request.value)
    if request.op == DEL:
        return encode_del(request.key)
    raise UnknownOperation(request.op)


# --- Decoding ---

def _read_token(stream):
    """Reads up to and including the next space, returns the stripped token."""
    buf = bytearray()
    while True:
        ch = stream.read(1)
        if not ch:
            raise ProtocolError(
                f"stream closed while reading length token (got {bytes(buf)!r})"
            )
        if ch == SEP:
            break
        buf += ch
    try:
        return buf.decode("ascii").strip()
    except UnicodeDecodeError:
        raise ProtocolError(f"non-ascii length token: {bytes(buf)!r}") from None


def _parse_length(token):
    if not token.isdigit():
        raise ProtocolError(f"bad length token: {token!r}")
    return int(token)


def _read_exact(stream, length):
    chunks = []
    bytes_left = length
    while bytes_left > 0:
        chunk = stream.read(bytes_left)
        if not chunk:
            raise ProtocolError(
                f"short read: expected {length} bytes, got {length - bytes_left}"
            )
        chunks.append(chunk)
        bytes_left -= len(chunk)
    return b"".join(chunks)


def _read_bytes_array(stream):
    return _read_exact(stream, _parse_length(_read_token(stream)))


def decode_response(stream):
    """
    Decodes exactly one response from a binary stream (anything with read(n)).

    A "-" length marker means the server answered with an error; its content
    follows as another <len> SP <bytes> run and is returned with is_error set.
    That is a normal response, not a failure of the read.
    """
    token = _read_token(stream)
    if token == ERR_MARKER:
        return Response(_read_bytes_array(stream), True)
    return Response(_read_exact(stream, _parse_length(token)), False)
