"""
Data Sources - live values rendered on the token

- api: generic bearer-token API returning a numeric ``param``
- weather: OpenWeatherMap current weather
"""

from live_nft.engines.data.schemas import DataRecord, ParamData, WeatherData
from live_nft.engines.data.sources import DataSource, ParamApiSource, WeatherSource, get_data_source

__all__ = [
    "DataRecord",
    "ParamData",
    "WeatherData",
    "DataSource",
    "ParamApiSource",
    "WeatherSource",
    "get_data_source",
]
