"""Flattening of the reservation-grouped describe-instances output.

The inventory query returns one list per reservation, each holding the
projected instances launched together::

    [[{"InstanceId": "i-1", "Name": "web", "PrivateIpAddress": "10.0.0.1"}],
     [{"InstanceId": "i-2", "Name": null, "PrivateIpAddress": "10.0.0.2"}]]

Records keep reservation order, then instance order within the reservation,
because the operator picks an instance by its position in the menu.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .errors import InventoryParseError
from .models import InstanceRecord

logger = logging.getLogger(__name__)


def parse_inventory(payload: str | bytes) -> list[InstanceRecord]:
    try:
        reservations = json.loads(payload)
    except (TypeError, ValueError) as error:
        raise InventoryParseError(f"Error parsing JSON output from AWS CLI: {error}") from error

    if not isinstance(reservations, list):
        raise InventoryParseError(
            f"Expected a list of reservations, got {type(reservations).__name__}"
        )

    records: list[InstanceRecord] = []
    for reservation_index, reservation in enumerate(reservations):
        if not isinstance(reservation, list):
            raise InventoryParseError(
                f"Reservation {reservation_index} is not a list of instances"
            )
        for instance in reservation:
            records.append(_to_record(instance, reservation_index))

    logger.debug("Parsed %d instance(s) from %d reservation(s)", len(records), len(reservations))
    return records


def _to_record(instance: Any, reservation_index: int) -> InstanceRecord:
    if not isinstance(instance, dict):
        raise InventoryParseError(
            f"Reservation {reservation_index} contains a non-object entry: {instance!r}"
        )

    instance_id = instance.get("InstanceId")
    if not isinstance(instance_id, str) or not instance_id:
        raise InventoryParseError(
            f"Reservation {reservation_index} contains an instance without an InstanceId"
        )

    return InstanceRecord(
        instance_id=instance_id,
        name=_optional_string(instance, "Name", instance_id),
        private_ip=_optional_string(instance, "PrivateIpAddress", instance_id),
    )


def _optional_string(instance: dict[str, Any], key: str, instance_id: str) -> str | None:
    value = instance.get(key)
    if value is None or isinstance(value, str):
        return value
    raise InventoryParseError(f"Field {key} of {instance_id} must be a string or null")
