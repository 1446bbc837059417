"""
Data Records

What the data sources return. Each record knows its NFT attributes (in
schema order) and the text lines drawn on the token image.
"""

from decimal import ROUND_FLOOR, Decimal
from typing import ClassVar, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, StrictInt, StrictStr, confloat


# JSON numbers only: no strings, booleans, NaN or Infinity
Number = Union[StrictInt, confloat(strict=True, allow_inf_nan=False)]

UNIT_SYMBOLS = {
    "metric": ("°C", "m/s"),
    "imperial": ("°F", "mph"),
    "standard": ("K", "m/s"),
}


def split_digit_groups(digits: str) -> List[str]:
    """Split a digit string into groups of three, counting from the right."""
    head = len(digits) % 3
    groups = [digits[:head]] if head else []
    groups.extend(digits[i:i + 3] for i in range(head, len(digits), 3))
    return groups


def round_half_up(value: Union[int, float], ndigits: int = 0) -> Union[int, float]:
    """Round like JavaScript's Math.round: halves go towards +infinity."""
    scale = Decimal(10) ** ndigits
    rounded = (Decimal(str(value)) * scale + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR) / scale
    return int(rounded) if ndigits == 0 else float(rounded)


def format_number(value: Union[int, float], group_digits: bool = False) -> str:
    """Format like a JSON number: 5.0 prints as 5."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value)
    if not group_digits:
        return text

    sign = "-" if text.startswith("-") else ""
    integer, _, fraction = text.lstrip("-").partition(".")
    if not integer.isdigit():
        return text
    grouped = " ".join(split_digit_groups(integer))
    return f"{sign}{grouped}.{fraction}" if fraction else f"{sign}{grouped}"


class ParamData(BaseModel):
    """Payload of the generic numeric API."""
    ATTRIBUTE_NAMES: ClassVar[List[str]] = ["param"]

    param: Number

    def attributes(self) -> List[Tuple[str, str]]:
        return [("param", format_number(self.param))]

    def display_lines(self, group_digits: bool = False) -> List[str]:
        return [format_number(self.param, group_digits)]


# =============================================================================
# OpenWeatherMap current weather response (only the fields we use)
# =============================================================================

class OpenWeatherMain(BaseModel):
    temp: Number
    humidity: Number


class OpenWeatherWind(BaseModel):
    speed: Number


class OpenWeatherCondition(BaseModel):
    main: StrictStr


class OpenWeatherResponse(BaseModel):
    name: Optional[str] = None
    main: OpenWeatherMain
    wind: OpenWeatherWind
    weather: List[OpenWeatherCondition] = Field(..., min_length=1)


class WeatherData(BaseModel):
    """Current weather for one city."""
    ATTRIBUTE_NAMES: ClassVar[List[str]] = ["Temperature", "Condition", "Humidity", "Wind speed"]

    city: str
    temperature: float
    humidity: float
    wind_speed: float
    condition: str
    units: str = "metric"

    @classmethod
    def from_openweather(cls, payload: OpenWeatherResponse, city: str, units: str) -> "WeatherData":
        return cls(
            city=payload.name or city,
            temperature=payload.main.temp,
            humidity=payload.main.humidity,
            wind_speed=payload.wind.speed,
            condition=payload.weather[0].main,
            units=units,
        )

    @property
    def temperature_symbol(self) -> str:
        return UNIT_SYMBOLS[self.units][0]

    @property
    def speed_unit(self) -> str:
        return UNIT_SYMBOLS[self.units][1]

    def attributes(self) -> List[Tuple[str, str]]:
        return [
            ("Temperature", f"{format_number(round_half_up(self.temperature, 1))}{self.temperature_symbol}"),
            ("Condition", self.condition),
            ("Humidity", f"{format_number(round_half_up(self.humidity))}%"),
            ("Wind speed", f"{format_number(round_half_up(self.wind_speed, 1))} {self.speed_unit}"),
        ]

    def display_lines(self, group_digits: bool = False) -> List[str]:
        return [
            f"{round_half_up(self.temperature)}{self.temperature_symbol}",
            self.condition,
            f"Humidity {round_half_up(self.humidity)}%",
            f"Wind {format_number(round_half_up(self.wind_speed, 1))} {self.speed_unit}",
        ]


DataRecord = Union[ParamData, WeatherData]
