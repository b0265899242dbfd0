"""NamedBin帧格式常量.

该模块定义了帧头部中使用的字段宽度和掩码.
"""

# 每个长度字段 (totalSize, nameLength, bodySize) 的字节数
LENGTH_FIELD_SIZE = 8

# 长度字段可表示的最大值
MAX_LENGTH_VALUE = (1 << (8 * LENGTH_FIELD_SIZE)) - 1

# 长度字段每字节的掩码
LENGTH_MASK = 0xFF
LEGACY_LENGTH_MASK = 0x0F

# totalSize 未计入的头部字节数 (totalSize 与 nameLength 字段本身)
# 整帧字节数 = totalSize + FRAME_OVERHEAD
FRAME_OVERHEAD = 2 * LENGTH_FIELD_SIZE

# 安全限制
MAX_FRAME_SIZE = 100 * 1024 * 1024  # 100MB
MAX_NAME_LENGTH = 64 * 1024  # 64KB
