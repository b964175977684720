from pathlib import Path

import pytest

from framerate.builder import CompatibilityEngine
from framerate.db import CatalogRepository
from framerate.schemas import Product


def make_part(name: str, category: str | None = None, product_id: str | None = None, **specs) -> Product:
    return Product(id=product_id, name=name, category=category, specs=specs)


@pytest.fixture
def part():
    return make_part


@pytest.fixture
def engine() -> CompatibilityEngine:
    return CompatibilityEngine()


@pytest.fixture
def repo(tmp_path: Path) -> CatalogRepository:
    return CatalogRepository(tmp_path / "catalog.db")


@pytest.fixture
def am5_build(part):
    return {
        "cpu": part("Ryzen 5 7600", socket="AM5", tdp="65W"),
        "motherboard": part("B650M Pro", socket="AM5", memory_type="DDR5", form_factor="Micro ATX"),
        "ram": part("Fury Beast 32GB", memory_type="DDR5"),
        "gpu": part("RTX 4070 SUPER", tdp="220 W", length="267 mm"),
        "psu": part("RM750e", power_output="750W"),
        "case": part("Lancool 216", max_gpu_length="392 mm", max_cooler_height="180 mm"),
        "cpu-cooler": part("AK620", height="160 mm"),
    }
