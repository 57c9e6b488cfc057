# -*- coding: utf-8 -*-
"""
tests/shared/utils/test_identifiers.py

Números legibles de orden y disputa.
"""

import re
from datetime import datetime, timezone

import pytest

from tradevault.shared.utils.identifiers import (
    generate_dispute_number,
    generate_order_number,
    to_base36,
)

_NUMBER = re.compile(r"^(ORD|DSP)-[0-9A-Z]+-[0-9A-Z]{4}$")


@pytest.mark.parametrize("value,expected", [(0, "0"), (35, "Z"), (36, "10"), (1295, "ZZ")])
def test_to_base36(value, expected):
    assert to_base36(value) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


def test_prefixes_and_shape():
    assert generate_order_number().startswith("ORD-")
    assert generate_dispute_number().startswith("DSP-")
    assert _NUMBER.match(generate_order_number())
    assert _NUMBER.match(generate_dispute_number())


def test_timestamp_segment_is_deterministic():
    now = datetime(2026, 10, 5, 14, 30, tzinfo=timezone.utc)
    a = generate_order_number(now)
    b = generate_order_number(now)
    assert a.split("-")[1] == b.split("-")[1] == to_base36(int(now.timestamp() * 1000))


# Fin del archivo tests/shared/utils/test_identifiers.py
