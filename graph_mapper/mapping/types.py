"""Fixed-width numeric domains.

Python numbers are unbounded, so sized targets are declared with
``typing.Annotated`` and annotated-types intervals. The same aliases
validate as constrained fields in Pydantic models.

Example::

    @dataclass
    class Packet:
        length: UInt16
        checksum: Int32
"""

from __future__ import annotations

from typing import Annotated

from annotated_types import Interval

Int8 = Annotated[int, Interval(ge=-(2**7), le=2**7 - 1)]
Int16 = Annotated[int, Interval(ge=-(2**15), le=2**15 - 1)]
Int32 = Annotated[int, Interval(ge=-(2**31), le=2**31 - 1)]
Int64 = Annotated[int, Interval(ge=-(2**63), le=2**63 - 1)]

UInt8 = Annotated[int, Interval(ge=0, le=2**8 - 1)]
UInt16 = Annotated[int, Interval(ge=0, le=2**16 - 1)]
UInt32 = Annotated[int, Interval(ge=0, le=2**32 - 1)]
UInt64 = Annotated[int, Interval(ge=0, le=2**64 - 1)]

# IEEE 754 single precision
FLOAT32_MAX = 3.4028234663852886e38
Float32 = Annotated[float, Interval(ge=-FLOAT32_MAX, le=FLOAT32_MAX)]
