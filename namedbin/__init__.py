"""NamedBin命名二进制帧序列化库.

提供了基于作用域栈的编码器 (NamedBinaryEncoder)、顺序直通解码器
(NamedBinaryDecoder)、帧感知解码器 (FramedDecoder) 以及帧解析功能.
"""

from .api import dump, dumps, iter_frames, load, loads
from .config import Config
from .decoder import FramedDecoder, NamedBinaryDecoder
from .encoder import NamedBinaryEncoder, Node
from .exceptions import (
    DecodeError,
    EncodeError,
    FrameError,
    NamedBinError,
    NamedBinTypeError,
    NamedBinValueError,
    ScopeError,
    ShortReadError,
    ShortWriteError,
)
from .frame import Frame, FrameReader, encode_frame
from .options import Option
from .stream import BufferSink, ByteSink, ByteSource, FrameStreamReader
from .types import (
    BOOL,
    FLOAT32,
    FLOAT64,
    INT8,
    INT16,
    INT32,
    INT64,
    LEAF_TYPES,
    SIZE_TAG,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    LeafType,
)

__version__ = "0.1.0"

__all__ = [
    "BOOL",
    "FLOAT32",
    "FLOAT64",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "LEAF_TYPES",
    "SIZE_TAG",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "BufferSink",
    "ByteSink",
    "ByteSource",
    "Config",
    "DecodeError",
    "EncodeError",
    "Frame",
    "FrameError",
    "FrameReader",
    "FrameStreamReader",
    "FramedDecoder",
    "LeafType",
    "NamedBinError",
    "NamedBinTypeError",
    "NamedBinValueError",
    "NamedBinaryDecoder",
    "NamedBinaryEncoder",
    "Node",
    "Option",
    "ScopeError",
    "ShortReadError",
    "ShortWriteError",
    "__version__",
    "dump",
    "dumps",
    "encode_frame",
    "iter_frames",
    "load",
    "loads",
]
