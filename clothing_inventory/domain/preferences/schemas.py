from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Preferences(BaseModel):
    low_stock_threshold: int
    sound_enabled: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PreferencesUpdate(BaseModel):
    low_stock_threshold: Optional[int] = None
    sound_enabled: Optional[bool] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
