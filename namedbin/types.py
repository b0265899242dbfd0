"""NamedBin叶子类型模块.

本模块定义了可以直接作为原始字节写入/读取的数值叶子类型.
所有类型均使用本机字节序与标准宽度 (`struct` 的 `=` 前缀),
不保证跨架构的可移植性.
"""

import struct
from typing import Any, ClassVar

from .exceptions import DecodeError, NamedBinTypeError, NamedBinValueError


class LeafType:
    """数值叶子类型的基类.

    具体类型 (如 `INT32`, `FLOAT64`) 只需声明 `fmt`,
    打包器会在子类创建时预编译. 通常直接把类本身传给
    `NamedBinaryEncoder.write_leaf()` / `NamedBinaryDecoder.read_leaf()`.
    """

    fmt: ClassVar[str] = ""
    _struct: ClassVar[struct.Struct]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.fmt:
            cls._struct = struct.Struct("=" + cls.fmt)

    @classmethod
    def size(cls) -> int:
        """返回该类型编码后的字节数."""
        return cls._struct.size

    @classmethod
    def validate(cls, value: Any) -> Any:
        """验证值是否符合类型要求.

        Args:
            value: 待验证的值.

        Returns:
            Any: 验证后的值.

        Raises:
            NamedBinTypeError: 类型不匹配时.
            NamedBinValueError: 值无效时.
        """
        return value

    @classmethod
    def pack(cls, value: Any) -> bytes:
        """将值打包为原始字节."""
        value = cls.validate(value)
        try:
            return cls._struct.pack(value)
        except (struct.error, OverflowError) as e:
            raise NamedBinValueError(
                f"Cannot pack {value!r} as {cls.__name__}: {e}"
            ) from e

    @classmethod
    def unpack(cls, data: bytes | bytearray | memoryview) -> Any:
        """从原始字节解包值."""
        if len(data) != cls._struct.size:
            raise DecodeError(
                f"{cls.__name__} needs {cls._struct.size} bytes, got {len(data)}"
            )
        return cls._struct.unpack(data)[0]


class BOOL(LeafType):
    """1 字节布尔值."""

    fmt = "?"

    @classmethod
    def validate(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in {0, 1}:
            return bool(value)
        raise NamedBinTypeError(f"Expected bool, got {type(value).__name__}")


class INT(LeafType):
    """整数叶子类型 (抽象基类).

    写入前会按宽度与符号检查范围, 超出范围抛出 `NamedBinValueError`.
    """

    @classmethod
    def bounds(cls) -> tuple[int, int]:
        """返回 (最小值, 最大值)."""
        bits = 8 * cls.size()
        if cls.fmt.islower():
            return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        return 0, (1 << bits) - 1

    @classmethod
    def validate(cls, value: Any) -> Any:
        if not isinstance(value, int):
            raise NamedBinTypeError(f"Expected int, got {type(value).__name__}")
        low, high = cls.bounds()
        if not low <= value <= high:
            raise NamedBinValueError(
                f"Integer out of range for {cls.__name__}: {value}"
            )
        return value


class INT8(INT):
    """有符号 1 字节整数."""

    fmt = "b"


class UINT8(INT):
    """无符号 1 字节整数."""

    fmt = "B"


class INT16(INT):
    """有符号 2 字节整数."""

    fmt = "h"


class UINT16(INT):
    """无符号 2 字节整数."""

    fmt = "H"


class INT32(INT):
    """有符号 4 字节整数."""

    fmt = "i"


class UINT32(INT):
    """无符号 4 字节整数."""

    fmt = "I"


class INT64(INT):
    """有符号 8 字节整数."""

    fmt = "q"


class UINT64(INT):
    """无符号 8 字节整数."""

    fmt = "Q"


class FLOAT(LeafType):
    """浮点叶子类型 (抽象基类)."""

    @classmethod
    def validate(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise NamedBinTypeError(f"Expected float, got {type(value).__name__}")
        return float(value)


class FLOAT32(FLOAT):
    """4 字节单精度浮点数."""

    fmt = "f"


class FLOAT64(FLOAT):
    """8 字节双精度浮点数."""

    fmt = "d"


# 序列长度标签: 作为普通整数叶子写入, 没有特殊帧
SIZE_TAG = UINT64

LEAF_TYPES: dict[str, type[LeafType]] = {
    "bool": BOOL,
    "int8": INT8,
    "uint8": UINT8,
    "int16": INT16,
    "uint16": UINT16,
    "int32": INT32,
    "uint32": UINT32,
    "int64": INT64,
    "uint64": UINT64,
    "float32": FLOAT32,
    "float64": FLOAT64,
}
