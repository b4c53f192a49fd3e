import random

import pytest

from slotforge.core.config import get_settings
from slotforge.schemas.generator import GenerationSettings
from slotforge.schemas.timetable import Constraints
from slotforge.services.time_slots import build_slot_catalog


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear() #settings are lru_cached, so env changes in one test would leak into the next
    yield
    get_settings.cache_clear()


@pytest.fixture()
def reference_slots():
    return build_slot_catalog(Constraints())


@pytest.fixture()
def rng():
    return random.Random(7)


@pytest.fixture()
def small_settings():
    return GenerationSettings(population_size=10, generations=5, random_seed=11)
