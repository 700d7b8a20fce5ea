"""Best-effort scalar conversion.

ScalarConverter.convert() never raises in its default mode: parse failures,
numeric overflow and unresolvable enum values all come back as the target's
zero/default value. Strict mode raises ConversionError instead. An
Optional target only yields None for a None input; failures fall back to
the default of the wrapped type.

Conversion order:
1. ``None`` -> target default.
2. Assignable value -> returned as is (aliased, not copied). Any other
   value for a composite or container target is a failure.
3. Enum target, then enum source.
4. Text source -> locale-invariant parse.
5. Text target -> string form.
6. Date/time pairs, booleans, numerics (range-checked via Decimal).
7. Pydantic TypeAdapter, then ``target(value)`` (byte buffers only from
   other buffers).
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import math
import re
import uuid
from decimal import ROUND_HALF_EVEN, Decimal
from fractions import Fraction
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter

from graph_mapper.core.exceptions import ConversionError
from graph_mapper.core.logging import get_logger
from graph_mapper.mapping.shapes import (
    NUMERIC_TYPES,
    PRIMITIVE_TYPES,
    TEMPORAL_TYPES,
    AnyShape,
    CompositeShape,
    ContainerShape,
    EnumShape,
    PrimitiveShape,
    Shape,
    TemporalShape,
    TextShape,
    describe,
)

logger = get_logger(__name__)

TRUE_TOKENS = frozenset({"true", "yes", "y", "1", "on"})
FALSE_TOKENS = frozenset({"false", "no", "n", "0", "off"})

# [-][d.]hh:mm[:ss[.fffffff]]
_CLOCK_DURATION = re.compile(
    r"^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})"
    r"(?::(?P<seconds>\d{1,2})(?:\.(?P<fraction>\d{1,7}))?)?$"
)
# str(timedelta): "2 days, 3:04:05.000006", "-1 day, 23:59:59"
_PYTHON_DURATION = re.compile(r"^(?P<days>-?\d+) days?, (?P<clock>\d+:\d{2}:\d{2}(?:\.\d+)?)$")
_DAY_COUNT = re.compile(r"^-?\d+$")
_BYTE_SOURCES = (bytes, bytearray, memoryview)


def default_value(shape: Shape) -> Any:
    """Zero/default value of a shape; None for reference-like shapes."""
    if shape.nullable:
        return None
    if isinstance(shape, TextShape):
        return shape.python_type()
    if isinstance(shape, EnumShape):
        return shape.first_member
    if isinstance(shape, PrimitiveShape):
        if issubclass(shape.python_type, uuid.UUID):
            return uuid.UUID(int=0)
        if issubclass(shape.python_type, PRIMITIVE_TYPES):
            return shape.python_type()
        return None
    if isinstance(shape, TemporalShape):
        target = shape.python_type
        if issubclass(target, dt.timedelta):
            return dt.timedelta(0)
        if issubclass(target, dt.time):
            return dt.time()
        if issubclass(target, dt.datetime):
            return dt.datetime.min.replace(tzinfo=dt.UTC) if shape.aware else dt.datetime.min
        return dt.date.min
    return None


def parse_duration(text: str) -> dt.timedelta:
    """Parse ``[-][d.]hh:mm[:ss[.f]]``, a day count, or ``str(timedelta)`` output."""
    value = text.strip()

    match = _PYTHON_DURATION.match(value)
    if match:
        return dt.timedelta(days=int(match["days"])) + parse_duration(match["clock"])

    if _DAY_COUNT.match(value):
        return dt.timedelta(days=int(value))

    match = _CLOCK_DURATION.match(value)
    if match is None:
        raise ValueError(f"invalid duration: {text!r}")

    hours, minutes = int(match["hours"]), int(match["minutes"])
    seconds = int(match["seconds"] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"duration component out of range: {text!r}")
    fraction = (match["fraction"] or "").ljust(6, "0")[:6]
    delta = dt.timedelta(
        days=int(match["days"] or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=int(fraction),
    )
    return -delta if match["sign"] else delta


@lru_cache(maxsize=256)
def _type_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _type_name(hint: Any) -> str:
    return getattr(hint, "__name__", repr(hint))


def _required(shape: Shape) -> Shape:
    """The same shape with Optional stripped."""
    return dataclasses.replace(shape, nullable=False) if shape.nullable else shape


def _is_number(value: object) -> bool:
    return isinstance(value, NUMERIC_TYPES) and not isinstance(value, bool)


def _widen(value: Any) -> Decimal:
    """Exact Decimal image of a real number."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, Fraction):
        return Decimal(value.numerator) / Decimal(value.denominator)
    if isinstance(value, complex):
        if value.imag != 0:
            raise ValueError("complex value has an imaginary part")
        return Decimal(value.real)
    return Decimal(value)


class ScalarConverter:
    """Converts one scalar value into a target scalar type.

    Args:
        strict: Raise ConversionError instead of returning the default.
    """

    def __init__(self, strict: bool = False) -> None:
        self._strict = strict

    @property
    def strict(self) -> bool:
        return self._strict

    def convert(self, value: Any, target: Any) -> Any:
        """Convert ``value`` to ``target`` (a type, typing hint or Shape)."""
        shape = target if isinstance(target, Shape) else describe(target)
        if value is None:
            return default_value(shape)
        try:
            return self._convert(value, shape)
        except Exception as exc:
            logger.debug(
                "scalar_conversion_failed",
                value_type=type(value).__name__,
                target=_type_name(shape.hint),
                error=str(exc),
            )
            if self._strict:
                if isinstance(exc, ConversionError):
                    raise
                raise ConversionError(value, _type_name(shape.hint), str(exc)) from exc
            # a failed conversion still yields a value, even for Optional targets
            return default_value(_required(shape))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _convert(self, value: Any, shape: Shape) -> Any:
        if isinstance(shape, AnyShape):
            return value
        python_type = getattr(shape, "python_type", None)
        if python_type is None:
            raise ConversionError(value, _type_name(shape.hint), "not a scalar target")
        if self._is_assignable(value, shape, python_type):
            return value
        if isinstance(shape, (CompositeShape, ContainerShape)):
            raise ConversionError(value, _type_name(shape.hint), "not a scalar target")

        if isinstance(shape, EnumShape):
            return self._to_enum(value, shape)
        if isinstance(value, enum.Enum):
            if isinstance(shape, TextShape):
                return python_type(value.name)
            return self._convert(value.value, shape)
        if isinstance(value, str):
            return self._from_text(value, shape)
        if isinstance(shape, TextShape):
            return python_type(self._to_text(value))
        if isinstance(shape, TemporalShape) or isinstance(value, TEMPORAL_TYPES):
            result = self._temporal(value, shape)
            if result is not None:
                return result
        if isinstance(shape, PrimitiveShape):
            if python_type is bool:
                return self._to_bool(value)
            if isinstance(value, bool) and shape.is_numeric:
                return self._numeric(int(value), shape)
            if _is_number(value) and shape.is_numeric:
                return self._numeric(value, shape)
        return self._fallback(value, shape, python_type)

    @staticmethod
    def _is_assignable(value: Any, shape: Shape, python_type: type) -> bool:
        if not isinstance(value, python_type):
            return False
        if isinstance(value, bool) and not issubclass(python_type, bool):
            return False
        if isinstance(value, enum.Enum) and not isinstance(shape, EnumShape):
            return False
        if isinstance(shape, TemporalShape) and isinstance(value, dt.datetime):
            if not issubclass(python_type, dt.datetime):
                return False
            if shape.aware is not None and (value.utcoffset() is not None) != shape.aware:
                return False
        if isinstance(shape, PrimitiveShape) and shape.bounds is not None:
            try:
                return shape.bounds.contains(_widen(value))
            except (ValueError, TypeError, ArithmeticError):
                return False
        return True

    # ------------------------------------------------------------------
    # Enumerations
    # ------------------------------------------------------------------

    def _to_enum(self, value: Any, shape: EnumShape) -> enum.Enum:
        enum_type = shape.python_type
        try:
            if isinstance(value, str):
                wanted = value.strip().casefold()
                for member in enum_type:
                    if member.name.casefold() == wanted:
                        return member
                return enum_type(int(wanted))
            if isinstance(value, enum.Enum):
                if value.name in enum_type.__members__:
                    return enum_type[value.name]
                return enum_type(value.value)
            return enum_type(value)
        except (KeyError, ValueError, TypeError) as exc:
            raise ConversionError(value, enum_type.__name__, "no matching member") from exc

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _from_text(self, text: str, shape: Shape) -> Any:
        python_type: type = shape.python_type  # type: ignore[attr-defined]
        stripped = text.strip()

        if isinstance(shape, PrimitiveShape):
            if issubclass(python_type, (bytes, bytearray)):
                return python_type(text.encode("utf-8"))
            if not stripped:
                raise ConversionError(text, python_type.__name__, "empty text")
            if python_type is bool:
                return self._parse_bool(stripped)
            if issubclass(python_type, int):
                return self._numeric(int(stripped), shape)
            if issubclass(python_type, float):
                return self._numeric(float(stripped), shape)
            if issubclass(python_type, Decimal):
                return self._numeric(Decimal(stripped), shape)
            if issubclass(python_type, Fraction):
                return python_type(stripped)
            if issubclass(python_type, complex):
                return python_type(stripped.replace(" ", ""))
            if issubclass(python_type, uuid.UUID):
                return python_type(stripped)
            return self._fallback(text, shape, python_type)

        if isinstance(shape, TemporalShape):
            if not stripped:
                raise ConversionError(text, python_type.__name__, "empty text")
            return self._parse_temporal(stripped, shape)

        return self._fallback(text, shape, python_type)

    @staticmethod
    def _to_text(value: Any) -> str:
        if isinstance(value, (dt.datetime, dt.date, dt.time)):
            return value.isoformat()
        if isinstance(value, (bytes, bytearray)):
            return value.decode("utf-8")
        return str(value)

    # ------------------------------------------------------------------
    # Booleans
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_bool(text: str) -> bool:
        token = text.casefold()
        if token in TRUE_TOKENS:
            return True
        if token in FALSE_TOKENS:
            return False
        raise ConversionError(text, "bool", "unrecognized boolean text")

    def _to_bool(self, value: Any) -> bool:
        token = str(value).casefold()
        if token in TRUE_TOKENS:
            return True
        if token in FALSE_TOKENS:
            return False
        if _is_number(value):
            return bool(value != 0)
        raise ConversionError(value, "bool", "no boolean interpretation")

    # ------------------------------------------------------------------
    # Numerics
    # ------------------------------------------------------------------

    @staticmethod
    def _numeric(value: Any, shape: PrimitiveShape) -> Any:
        """Convert between numeric types, zeroing instead of overflowing."""
        target = shape.python_type
        bounds = shape.bounds
        name = target.__name__

        if issubclass(target, int):
            wide = _widen(value)
            if not wide.is_finite():
                raise ConversionError(value, name, "not a finite number")
            integral = wide.to_integral_value(rounding=ROUND_HALF_EVEN)
            if bounds is not None and not bounds.contains(integral):
                raise ConversionError(value, name, "out of range")
            return target(int(integral))

        if issubclass(target, float):
            result = float(value)
            if math.isinf(result) and not (isinstance(value, float) and math.isinf(value)):
                raise ConversionError(value, name, "out of range")
            in_bounds = bounds is None or math.isnan(result) or bounds.contains(Decimal(result))
            if not in_bounds:
                raise ConversionError(value, name, "out of range")
            return target(result)

        if issubclass(target, Decimal):
            if isinstance(value, float):
                return target(repr(value))
            return target(_widen(value))

        if issubclass(target, Fraction):
            return target(_widen(value) if isinstance(value, complex) else value)

        return target(value)

    # ------------------------------------------------------------------
    # Date / time
    # ------------------------------------------------------------------

    def _parse_temporal(self, text: str, shape: TemporalShape) -> Any:
        target = shape.python_type
        if issubclass(target, dt.datetime):
            return self._with_offset(target.fromisoformat(text), shape.aware)
        if issubclass(target, dt.date):
            try:
                return target.fromisoformat(text)
            except ValueError:
                return dt.datetime.fromisoformat(text).date()
        if issubclass(target, dt.time):
            return target.fromisoformat(text)
        return parse_duration(text)

    def _temporal(self, value: Any, shape: Shape) -> Any:
        """Explicit rules per date/time pair; None when no rule applies.

        datetime -> datetime: attach local offset / drop offset as required
        date     -> datetime: midnight of that date
        datetime -> date:     calendar date
        datetime -> time:     wall-clock time
        number   -> timedelta: seconds
        number   -> datetime:  POSIX timestamp (UTC)
        timedelta -> number:  total seconds
        datetime  -> number:  POSIX timestamp
        """
        if isinstance(shape, TemporalShape):
            target = shape.python_type
            if issubclass(target, dt.datetime):
                if isinstance(value, dt.datetime):
                    return self._with_offset(value, shape.aware)
                if isinstance(value, dt.date):
                    return self._with_offset(dt.datetime.combine(value, dt.time()), shape.aware)
                if _is_number(value):
                    stamp = dt.datetime.fromtimestamp(float(value), tz=dt.UTC)
                    return self._with_offset(stamp, shape.aware)
                return None
            if issubclass(target, dt.date) and isinstance(value, dt.datetime):
                return value.date()
            if issubclass(target, dt.time) and isinstance(value, dt.datetime):
                return value.time()
            if issubclass(target, dt.timedelta) and _is_number(value):
                return dt.timedelta(seconds=float(value))
            return None

        if isinstance(shape, PrimitiveShape) and shape.is_numeric:
            if isinstance(value, dt.timedelta):
                return self._numeric(value.total_seconds(), shape)
            if isinstance(value, dt.datetime):
                return self._numeric(value.timestamp(), shape)
        return None

    @staticmethod
    def _with_offset(value: dt.datetime, aware: bool | None) -> dt.datetime:
        has_offset = value.utcoffset() is not None
        if aware is True and not has_offset:
            return value.astimezone()
        if aware is False and has_offset:
            return value.replace(tzinfo=None)
        return value

    # ------------------------------------------------------------------
    # Fallback
    # ------------------------------------------------------------------

    @staticmethod
    def _fallback(value: Any, shape: Shape, python_type: type) -> Any:
        try:
            return _type_adapter(python_type).validate_python(value)
        except Exception:
            logger.debug(
                "type_adapter_rejected",
                value_type=type(value).__name__,
                target=_type_name(shape.hint),
            )
        if issubclass(python_type, (bytes, bytearray)) and not isinstance(value, _BYTE_SOURCES):
            # bytes(n) would allocate n zero bytes
            raise ConversionError(value, _type_name(shape.hint), "not a byte buffer")
        return python_type(value)
