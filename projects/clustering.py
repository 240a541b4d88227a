"""
Grouping of nearby project pins so the map draws one marker per site.

Grouping is seed-relative: each group is started by the first unprocessed
record in input order, and only records within the threshold of that seed
join it. A record close to a non-seed member but far from the seed starts
(or joins) another group. This is not transitive clustering and must not be
turned into it without the system owner's sign-off.
"""
import math

EARTH_RADIUS_KM = 6371.0

# One thousandth of a degree of arc on the 6371 km sphere, about 111 m
CLUSTER_THRESHOLD_KM = EARTH_RADIUS_KM * math.radians(0.001)


def haversine_km(lat1, lon1, lat2, lon2):
    """Great-circle distance in kilometres on a sphere of radius 6371 km."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _coordinates(item):
    coordinates = getattr(item, 'coordinates', None)
    if coordinates is None:
        coordinates = item['coordinates']
    return coordinates


def group_by_location(records, threshold_km=CLUSTER_THRESHOLD_KM):
    """
    Partition records into location groups.

    Args:
        records: Sequence of ProjectRecord (or dicts with 'coordinates')
        threshold_km: Distance from the seed below which a record joins

    Returns:
        List of non-empty lists. Groups are ordered by when their seed was
        first encountered, members by scan order.
    """
    groups = []
    processed = [False] * len(records)

    for i, seed in enumerate(records):
        if processed[i]:
            continue

        group = [seed]
        processed[i] = True
        seed_lat, seed_lon = _coordinates(seed)

        for j in range(i + 1, len(records)):
            if processed[j]:
                continue
            lat, lon = _coordinates(records[j])
            if haversine_km(seed_lat, seed_lon, lat, lon) < threshold_km:
                group.append(records[j])
                processed[j] = True

        groups.append(group)

    return groups
