"""
Coordinate types, bounding boxes and Google polyline encoding.

Polyline algorithm (https://developers.google.com/maps/documentation/utilities/polylinealgorithm):
  1. Scale each lat/lng by 10^precision and round to an integer
  2. Delta-encode against the previous point (first point against 0,0)
  3. Zig-zag: left-shift by one, invert all bits if the value was negative
  4. Split into 5-bit chunks, low bits first; OR 0x20 on every chunk but the last
  5. Add 63 to each chunk and emit as an ASCII character

Precision 5 (1e5 scale) is what map clients expect, giving ~1.1m resolution.
"""
import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence

DEFAULT_PRECISION = 5


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 position in decimal degrees."""

    lat: float
    lng: float

    def is_valid(self) -> bool:
        return is_valid_coordinate(self.lat, self.lng)


@dataclass(frozen=True)
class Bounds:
    """Bounding box: south-west and north-east corners."""

    sw: Coordinate
    ne: Coordinate


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """True when lat is within [-90, 90] and lng within [-180, 180]."""
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def compute_bounds(coords: Sequence[Coordinate]) -> Bounds:
    """
    Compute the bounding box of a coordinate list.

    An empty list yields a (0,0)-(0,0) box. Callers should treat empty tracks
    separately rather than relying on that value.
    """
    if not coords:
        return Bounds(sw=Coordinate(0.0, 0.0), ne=Coordinate(0.0, 0.0))

    lats = [c.lat for c in coords]
    lngs = [c.lng for c in coords]
    return Bounds(
        sw=Coordinate(min(lats), min(lngs)),
        ne=Coordinate(max(lats), max(lngs)),
    )


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(coords: Iterable[Coordinate], precision: int = DEFAULT_PRECISION) -> str:
    """Encode coordinates as a Google polyline string. Empty input gives ''."""
    factor = 10 ** precision
    out: List[str] = []
    prev_lat = 0
    prev_lng = 0

    for coord in coords:
        lat = _round_half_away(coord.lat * factor)
        lng = _round_half_away(coord.lng * factor)
        out.append(_encode_value(lat - prev_lat))
        out.append(_encode_value(lng - prev_lng))
        prev_lat, prev_lng = lat, lng

    return "".join(out)


def _round_half_away(value: float) -> int:
    # Python's round() is banker's rounding; the reference encoders round half away from zero
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def _decode_value(encoded: str, index: int):
    result = 0
    shift = 0
    while True:
        byte = ord(encoded[index]) - 63
        index += 1
        result |= (byte & 0x1F) << shift
        shift += 5
        if byte < 0x20:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def decode_polyline(encoded: str, precision: int = DEFAULT_PRECISION) -> List[Coordinate]:
    """
    Decode a Google polyline string back into coordinates.

    Raises:
        ValueError: if the string is truncated mid-value.
    """
    if not encoded:
        return []

    factor = 10 ** precision
    coords: List[Coordinate] = []
    index = 0
    lat = 0
    lng = 0

    try:
        while index < len(encoded):
            d_lat, index = _decode_value(encoded, index)
            d_lng, index = _decode_value(encoded, index)
            lat += d_lat
            lng += d_lng
            coords.append(Coordinate(lat / factor, lng / factor))
    except IndexError as exc:
        raise ValueError(f"Truncated polyline at offset {index}") from exc

    return coords


def simplify_polyline(coords: Sequence[Coordinate], tolerance: float = 0.00001) -> List[Coordinate]:
    """
    Thin a track for display by dropping points too close to the last kept one.

    Greedy, not Douglas-Peucker: the first and last points are always kept, an
    intermediate point survives when its planar distance in degrees from the
    previously kept point is at least `tolerance`. Only used for rendering;
    metrics are always computed on the full track.
    """
    if len(coords) <= 2:
        return list(coords)

    result = [coords[0]]
    prev = coords[0]
    for curr in coords[1:-1]:
        dist = math.hypot(curr.lat - prev.lat, curr.lng - prev.lng)
        if dist >= tolerance:
            result.append(curr)
            prev = curr

    result.append(coords[-1])
    return result
