from __future__ import annotations

from sdmx_region.catalogue.dimensions import parse_dimension_descriptors
from sdmx_region.catalogue.roles import RoleIds, resolve_special_roles


def _dimension(key_position: int, dimension_id: str, count: int) -> dict:
    return {
        "keyPosition": key_position,
        "id": dimension_id,
        "name": dimension_id,
        "values": [{"id": f"{dimension_id}{i}", "name": str(i)} for i in range(count)],
    }


def test_resolver_finds_default_roles_by_id() -> None:
    descriptors = parse_dimension_descriptors(
        [
            _dimension(3, "REGION", 4),
            _dimension(0, "MEASURE", 2),
            _dimension(1, "REGIONTYPE", 1),
            _dimension(2, "FREQUENCY", 1),
            _dimension(4, "TIME_PERIOD", 1),
        ]
    )
    roles = resolve_special_roles(descriptors)

    assert roles.region_dimension_index == 3
    assert roles.region_type_dimension_index == 1
    assert roles.frequency_dimension_index == 2
    assert roles.time_period_dimension_index == 4
    assert roles.region_count == 4
    assert roles.region_type_count == 1
    assert roles.has_regions
    assert roles.fixed_dimensions() == frozenset({1, 2, 3, 4})


def test_resolver_first_match_wins() -> None:
    descriptors = parse_dimension_descriptors(
        [
            _dimension(0, "REGION", 2),
            _dimension(1, "REGION", 5),
            _dimension(2, "REGIONTYPE", 3),
        ]
    )
    roles = resolve_special_roles(descriptors)

    assert roles.region_dimension_index == 0
    assert roles.region_count == 2
    assert roles.region_type_count == 3


def test_resolver_uses_configured_ids() -> None:
    descriptors = parse_dimension_descriptors(
        [_dimension(0, "ASGS_2011", 3), _dimension(1, "REGION_TYPE", 1)]
    )
    roles = resolve_special_roles(
        descriptors, RoleIds(region="ASGS_2011", region_type="REGION_TYPE")
    )

    assert roles.region_dimension_index == 0
    assert roles.region_type_dimension_index == 1
    assert roles.time_period_dimension_index is None


def test_resolver_without_region_dimension() -> None:
    roles = resolve_special_roles(parse_dimension_descriptors([_dimension(0, "MEASURE", 2)]))

    assert roles.region_dimension_index is None
    assert not roles.has_regions
    assert roles.fixed_dimensions() == frozenset()
