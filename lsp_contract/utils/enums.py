import enum
import sys

if sys.version_info < (3, 11):

    class StrEnum(str, enum.Enum):
        def __str__(self) -> str:
            return self.value

else:

    class StrEnum(enum.StrEnum):
        pass
