"""Human-readable text for location reports."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from location_share.domain.locations import AddressDetails, LocationReport

_MISSING = "N/A"


def format_time(timestamp_ms: int, timezone: str = "UTC") -> str:
    """Format an epoch-millisecond timestamp as a wall-clock time."""
    try:
        moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)
        local = moment.astimezone(ZoneInfo(timezone))
    except (OverflowError, OSError, ValueError):
        return _MISSING
    return local.strftime("%H:%M:%S")


def street_line(address: AddressDetails) -> str:
    if not address.street:
        return _MISSING
    if address.number:
        return f"{address.street}, {address.number}"
    return address.street


def city_state_line(address: AddressDetails) -> str:
    if address.city and address.state:
        return f"{address.city} - {address.state}"
    return address.city or address.state or _MISSING


def format_address_lines(address: AddressDetails) -> list[str]:
    return [
        f"Street: {street_line(address)}",
        f"Neighborhood: {address.neighborhood or _MISSING}",
        f"City/State: {city_state_line(address)}",
        f"Postcode: {address.postcode or _MISSING}",
    ]


def format_popup(report: LocationReport, timezone: str = "UTC") -> str:
    """Build the map marker popup for a report."""
    lines = [
        "Location updated:",
        f"Time: {format_time(report.timestamp, timezone)}",
        "Estimated address:",
        *format_address_lines(report.address),
        "Coordinates:",
        f"Lat: {report.latitude:.6f}, Lon: {report.longitude:.6f}",
        f"Accuracy: ±{report.accuracy:.1f}m",
    ]
    return "\n".join(lines)


def format_tracker_status(report: LocationReport, timezone: str = "UTC") -> str:
    """Build the tracker status line for the latest report."""
    return (
        f"Location received at {format_time(report.timestamp, timezone)} "
        f"(accuracy: {report.accuracy:.1f}m)\n"
        f"Address: {street_line(report.address)}, {city_state_line(report.address)}"
    )


def format_submitter_detail(report: LocationReport, timezone: str = "UTC") -> str:
    """Build the submitter confirmation panel for a stored report."""
    lines = [
        "Location sent successfully!",
        f"Last update: {format_time(report.timestamp, timezone)}",
        f"Lat: {report.latitude:.6f}, Lon: {report.longitude:.6f}",
        f"Accuracy: {report.accuracy:.1f} meters",
    ]
    if report.address.is_empty():
        lines.append("Address not found or service unavailable.")
    else:
        lines.extend(format_address_lines(report.address))
    return "\n".join(lines)
