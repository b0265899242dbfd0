"""NamedBin 配置对象."""

from pydantic import BaseModel, ConfigDict, Field

from .const import LEGACY_LENGTH_MASK, LENGTH_MASK, MAX_FRAME_SIZE, MAX_NAME_LENGTH
from .options import Option


class Config(BaseModel):
    """NamedBin 编码/解码配置 (不可变).

    这是所有配置的统一容器, 在 API 入口层创建,
    然后传递给 Encoder/Decoder 内核. 构造时由 pydantic 校验各项限制.

    Attributes:
        flags: 选项标志 (IntFlag).
        max_frame_size: 单帧帧体允许的最大字节数 (解码时校验).
        max_name_length: 字段名允许的最大字节数 (解码时校验).
    """

    model_config = ConfigDict(frozen=True)

    flags: Option = Option.NONE
    max_frame_size: int = Field(default=MAX_FRAME_SIZE, gt=0)
    max_name_length: int = Field(default=MAX_NAME_LENGTH, ge=0)

    @classmethod
    def from_params(
        cls,
        option: Option = Option.NONE,
        max_frame_size: int = MAX_FRAME_SIZE,
        max_name_length: int = MAX_NAME_LENGTH,
    ) -> "Config":
        """从参数构建配置对象.

        Args:
            option: Option 枚举.
            max_frame_size: 单帧帧体的最大字节数.
            max_name_length: 字段名的最大字节数.

        Returns:
            Config: 配置对象.

        Raises:
            pydantic.ValidationError: 限制值无效时.
        """
        return cls(
            flags=option,
            max_frame_size=max_frame_size,
            max_name_length=max_name_length,
        )

    @property
    def length_mask(self) -> int:
        """写入长度字段时每字节使用的掩码."""
        if self.flags & Option.LEGACY_LENGTH_MASK:
            return LEGACY_LENGTH_MASK
        return LENGTH_MASK

    @property
    def strict_names(self) -> bool:
        """是否校验帧名与预期字段名一致."""
        return bool(self.flags & Option.STRICT_NAMES)

    @property
    def zero_copy(self) -> bool:
        """是否使用零复制模式."""
        return bool(self.flags & Option.ZERO_COPY)

    @property
    def option(self) -> int:
        """返回 int 形式的 option 值."""
        return int(self.flags)


def resolve_config(option: Option = Option.NONE, config: Config | None = None) -> Config:
    """返回显式传入的配置, 否则由 option 构建默认配置."""
    if config is not None:
        return config
    return Config.from_params(option=option)
