"""NamedBin编码和解码的配置选项.

该模块定义了用于控制编码器、解码器和帧读取器行为的选项标志.
"""

from enum import IntFlag


class Option(IntFlag):
    """NamedBin 配置选项标志.

    可以使用位运算组合多个选项:
        option = Option.STRICT_NAMES | Option.ZERO_COPY
    """

    # 默认行为:
    # 1. 长度字段每字节保留完整 8 位
    # 2. 不校验字段名
    # 3. 帧体返回 bytes 副本
    NONE = 0x00

    # --- 编码选项 ---

    # 旧版长度掩码:
    # 长度字段每字节只保留低 4 位, 生成与旧版实现逐字节一致的输出.
    # 仅用于兼容性测试; 任一字节超过 15 的长度会被破坏, FrameReader 通常无法解析.
    LEGACY_LENGTH_MASK = 0x01

    # --- 解码选项 ---

    # 严格字段名:
    # FramedDecoder 读取新帧时, 帧名必须与预期字段名一致.
    STRICT_NAMES = 0x02

    # 零拷贝模式:
    # FrameReader 返回帧体的 memoryview 切片而不是复制内存.
    # 警告: 原始 buffer 释放后访问该 memoryview 会出错.
    ZERO_COPY = 0x04
