"""
Zone and port reference catalog.

The catalog is a CSV object in S3, one row per zone or port keyed by
``zone_id``. It is read once per Lambda process on first use and kept for the
lifetime of the process; there is no invalidation, a redeploy picks up a new
file.
"""

import csv
import io
import json
from typing import Any, Dict, List, Optional, Union

import boto3
from shapely import wkt
from shapely.errors import ShapelyError
from shapely.geometry import mapping

from devportal.handlers.models.env_vars import get_geodata_env_vars
from devportal.handlers.utils.observability import logger, tracer

GEOMETRY_ERROR = 'error'
PORT_ZONE_TYPE = 'Ports'

SEARCH_FIELDS = [
    'name',
    'iso3_code',
    'country_common_name',
    'country_official_name',
    'description',
    'subdivision',
    'subdivision_name',
    'unlocode',
    'wpi_number',
    'zone_type',
    'zone_sub_type',
]

ZonePortRecord = Dict[str, Any]


def wkt_to_geojson(wkt_string: str) -> str:
    """Convert WKT to a GeoJSON geometry string, or ``"error"``."""
    try:
        geometry = wkt.loads(wkt_string)
    except ShapelyError as e:
        logger.warning('Could not parse WKT geometry', extra={'error': str(e)})
        return GEOMETRY_ERROR
    if geometry.is_empty:
        return GEOMETRY_ERROR
    return json.dumps(mapping(geometry))


def wkt_to_array(wkt_string: str) -> Union[List[List[float]], str]:
    """Convert WKT to a flat coordinate list, or ``"error"``."""
    try:
        geometry = wkt.loads(wkt_string)
    except ShapelyError as e:
        logger.warning('Could not parse WKT geometry', extra={'error': str(e)})
        return GEOMETRY_ERROR
    if geometry.is_empty:
        return GEOMETRY_ERROR

    if geometry.geom_type == 'Polygon':
        coordinates = geometry.exterior.coords
    elif geometry.geom_type == 'MultiPolygon':
        coordinates = geometry.geoms[0].exterior.coords
    elif geometry.geom_type == 'Point':
        coordinates = [geometry.coords[0]]
    elif geometry.geom_type == 'LineString':
        coordinates = geometry.coords
    else:
        logger.warning('Unsupported geometry type', extra={'geom_type': geometry.geom_type})
        return GEOMETRY_ERROR

    return [list(point) for point in coordinates]


def _without_wkt(record: ZonePortRecord) -> ZonePortRecord:
    return {key: value for key, value in record.items() if key != 'geometry_wkt'}


class ZonePortCatalog:
    """Load-once, read-through cache of the zone and port CSV."""

    def __init__(self, bucket_name: str, csv_key: str, s3_client: Any = None) -> None:
        self.bucket_name = bucket_name
        self.csv_key = csv_key
        self._s3_client = s3_client
        self._records: Optional[Dict[str, ZonePortRecord]] = None

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    @tracer.capture_method(capture_response=False)
    def load(self) -> Dict[str, ZonePortRecord]:
        """Return all records keyed by zone id, reading S3 on the first call only."""
        if self._records is not None:
            return self._records

        logger.info('Loading zone and port CSV', extra={'bucket': self.bucket_name, 'key': self.csv_key})
        s3_client = self._s3_client or boto3.client('s3')
        response = s3_client.get_object(Bucket=self.bucket_name, Key=self.csv_key)
        content = response['Body'].read().decode('utf-8-sig')

        records: Dict[str, ZonePortRecord] = {}
        for row in csv.DictReader(io.StringIO(content)):
            zone_id = row.get('zone_id')
            if zone_id:
                records[zone_id] = row

        logger.info('Zone and port catalog built', extra={'record_count': len(records)})
        self._records = records
        return records

    def get(self, zone_id: str) -> Optional[ZonePortRecord]:
        """Return one record with its geometry converted, or None."""
        record = self.load().get(zone_id)
        if record is None:
            logger.info('No zone or port record found', extra={'zone_id': zone_id})
            return None

        enriched = dict(record)
        if enriched.get('geometry_wkt'):
            enriched['geometry_geojson'] = wkt_to_geojson(enriched['geometry_wkt'])
            enriched['geometry_array'] = wkt_to_array(enriched['geometry_wkt'])
        return enriched

    def search(self, keyword: str) -> Dict[str, Any]:
        """Case-insensitive substring search, split into ports and other zones."""
        term = keyword.lower()
        ports: List[ZonePortRecord] = []
        zones: List[ZonePortRecord] = []

        for record in self.load().values():
            if not any(term in str(record.get(field) or '').lower() for field in SEARCH_FIELDS):
                continue
            if record.get('zone_type') == PORT_ZONE_TYPE:
                ports.append(_without_wkt(record))
            else:
                zones.append(_without_wkt(record))

        return {
            'meta': {
                'keyword': keyword,
                'totalRecords': len(ports) + len(zones),
                'totalPorts': len(ports),
                'totalZones': len(zones),
            },
            'data': {
                'ports': ports,
                'zones': zones,
            },
        }


_catalog: Optional[ZonePortCatalog] = None


def get_catalog() -> ZonePortCatalog:
    """Get or create the process-wide catalog."""
    global _catalog

    if _catalog is None:
        settings = get_geodata_env_vars()
        _catalog = ZonePortCatalog(bucket_name=settings.BUCKET_NAME, csv_key=settings.ZONES_CSV_KEY)

    return _catalog
