"""
Targeting builder for ad set audiences.

Normalizes user edits (ages, radii, placements) as they happen and turns a
validated TargetingSpec into the backend's ``targeting`` payload.
"""

import logging
from typing import Any, Dict, List, Optional

from models.data_models import TargetingSpec, CustomLocation
from .error_handler import ValidationError

logger = logging.getLogger(__name__)


MIN_RADIUS_KM = 2
MAX_RADIUS_KM = 17
DEFAULT_RADIUS_KM = 5
DUPLICATE_TOLERANCE_DEG = 0.0001  # roughly 11 m at the equator
MIN_AGE = 13
MAX_AGE = 65

PUBLISHER_PLATFORMS = ("facebook", "instagram", "messenger", "audience_network")
FACEBOOK_POSITIONS = ("feed", "instant_article", "marketplace", "video_feeds", "story", "search")
INSTAGRAM_POSITIONS = ("stream", "reels", "story", "explore")
DEVICE_PLATFORMS = ("mobile", "desktop")
GENDERS = {1: "Male", 2: "Female"}


def parse_age(value: Any, prior: int) -> int:
    """Parse an age entry, keeping the prior value for non-numeric input."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return prior


def clamp_radius(value: Any) -> float:
    """
    Clamp a radius entry into the allowed kilometre range.

    Non-numeric input becomes the default radius.
    """
    try:
        radius = float(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_RADIUS_KM

    if radius != radius:  # NaN
        return DEFAULT_RADIUS_KM
    if radius < MIN_RADIUS_KM:
        return MIN_RADIUS_KM
    if radius > MAX_RADIUS_KM:
        return MAX_RADIUS_KM
    return int(radius) if radius.is_integer() else radius


def _toggle(values: List[str], value: str) -> List[str]:
    if value in values:
        return [v for v in values if v != value]
    return values + [value]


class TargetingBuilder:
    """
    Owns one TargetingSpec and applies edit rules to it.

    Edits that would break an invariant are rejected as no-ops and reported
    through the boolean return value.
    """

    def __init__(self, spec: Optional[TargetingSpec] = None):
        self.spec = spec if spec is not None else TargetingSpec()

    # Demographics

    def set_age_min(self, value: Any) -> int:
        self.spec.age_min = parse_age(value, self.spec.age_min)
        return self.spec.age_min

    def set_age_max(self, value: Any) -> int:
        self.spec.age_max = parse_age(value, self.spec.age_max)
        return self.spec.age_max

    def toggle_gender(self, gender: int):
        if gender not in GENDERS:
            raise ValueError(f"Unknown gender code: {gender}")
        self.spec.genders = _toggle(self.spec.genders, gender)

    # Locations

    def is_duplicate(self, latitude: float, longitude: float) -> bool:
        return any(
            abs(loc.latitude - latitude) < DUPLICATE_TOLERANCE_DEG and
            abs(loc.longitude - longitude) < DUPLICATE_TOLERANCE_DEG
            for loc in self.spec.custom_locations
        )

    def add_location(self, location: CustomLocation) -> bool:
        """
        Add a custom location unless it duplicates an existing one.

        Returns:
            True if the location was added
        """
        if self.is_duplicate(location.latitude, location.longitude):
            logger.warning(
                f"Rejected duplicate location ({location.latitude}, {location.longitude})"
            )
            return False

        location.radius_km = clamp_radius(location.radius_km)
        self.spec.custom_locations.append(location)
        return True

    def update_radius(self, index: int, value: Any) -> float:
        location = self.spec.custom_locations[index]
        location.radius_km = clamp_radius(value)
        return location.radius_km

    def remove_location(self, index: int) -> CustomLocation:
        return self.spec.custom_locations.pop(index)

    def clear_locations(self):
        self.spec.custom_locations = []

    def toggle_country(self, country_code: str):
        self.spec.countries = _toggle(self.spec.countries, country_code.upper())

    # Placements

    def toggle_publisher_platform(self, platform: str) -> bool:
        """Toggle a publisher platform; removing the last one is refused."""
        if platform not in PUBLISHER_PLATFORMS:
            raise ValueError(f"Unknown publisher platform: {platform}")

        if self.spec.publisher_platforms == [platform]:
            logger.info("Refused to remove the last publisher platform")
            return False

        self.spec.publisher_platforms = _toggle(self.spec.publisher_platforms, platform)
        return True

    def toggle_facebook_position(self, position: str):
        if position not in FACEBOOK_POSITIONS:
            raise ValueError(f"Unknown Facebook position: {position}")
        self.spec.facebook_positions = _toggle(self.spec.facebook_positions, position)

    def toggle_instagram_position(self, position: str):
        """
        Toggle an Instagram position.

        Explore requires the stream (feed) position: selecting explore also
        selects stream, and dropping stream drops explore with it.
        """
        if position not in INSTAGRAM_POSITIONS:
            raise ValueError(f"Unknown Instagram position: {position}")

        positions = list(self.spec.instagram_positions)
        if position in positions:
            positions.remove(position)
            if position == "stream" and "explore" in positions:
                positions.remove("explore")
        else:
            positions.append(position)
            if position == "explore" and "stream" not in positions:
                positions.append("stream")

        self.spec.instagram_positions = positions

    def toggle_device_platform(self, device: str):
        if device not in DEVICE_PLATFORMS:
            raise ValueError(f"Unknown device platform: {device}")
        self.spec.device_platforms = _toggle(self.spec.device_platforms, device)

    # Validation and payload

    def validate(self) -> List[str]:
        """Return the list of problems that block ad set creation."""
        issues = []
        spec = self.spec

        if not spec.custom_locations:
            issues.append("Please add at least one custom location")

        if not MIN_AGE <= spec.age_min <= MAX_AGE:
            issues.append(f"Min Age must be between {MIN_AGE} and {MAX_AGE}")
        if not MIN_AGE <= spec.age_max <= MAX_AGE:
            issues.append(f"Max Age must be between {MIN_AGE} and {MAX_AGE}")
        if spec.age_min > spec.age_max:
            issues.append("Min Age cannot be greater than Max Age")

        if any(not MIN_RADIUS_KM <= loc.radius_km <= MAX_RADIUS_KM for loc in spec.custom_locations):
            issues.append(
                f"All custom locations must have a radius between {MIN_RADIUS_KM} km and {MAX_RADIUS_KM} km"
            )

        if not spec.publisher_platforms:
            issues.append("Please select at least one publisher platform")

        return issues

    def build(self) -> Dict[str, Any]:
        """
        Build the ``targeting`` payload.

        Raises:
            ValidationError: if the targeting is not ready for submission
        """
        issues = self.validate()
        if issues:
            raise ValidationError(issues[0], issues=issues, field="targeting")

        spec = self.spec
        geo_locations: Dict[str, Any] = {
            'custom_locations': [
                {
                    'latitude': loc.latitude,
                    'longitude': loc.longitude,
                    'radius': loc.radius_km,
                    'distance_unit': loc.distance_unit or "kilometer",
                }
                for loc in spec.custom_locations
            ]
        }
        if spec.countries:
            geo_locations['countries'] = list(spec.countries)

        targeting: Dict[str, Any] = {
            'geo_locations': geo_locations,
            'age_min': spec.age_min,
            'age_max': spec.age_max,
            'publisher_platforms': list(spec.publisher_platforms),
        }

        optional_lists = {
            'device_platforms': spec.device_platforms,
            'genders': spec.genders,
            'facebook_positions': spec.facebook_positions,
            'instagram_positions': spec.instagram_positions,
            'interests': spec.interests,
            'work_positions': spec.work_positions,
            'work_employers': spec.work_employers,
        }
        for key, values in optional_lists.items():
            if values:
                targeting[key] = list(values)

        return targeting
