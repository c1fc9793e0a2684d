"""
Unit tests for the zone and port catalog and WKT conversion.
"""

import json

import boto3
import pytest
from moto import mock_aws

from devportal.logic.geodata import ZonePortCatalog, get_catalog, wkt_to_array, wkt_to_geojson


class TestWktConversion:
    """Geometry conversion helpers."""

    def test_polygon_to_geojson(self):
        geojson = json.loads(wkt_to_geojson("POLYGON ((0 0, 1 0, 1 1, 0 0))"))

        assert geojson["type"] == "Polygon"
        assert [list(point) for point in geojson["coordinates"][0]] == [[0, 0], [1, 0], [1, 1], [0, 0]]

    def test_polygon_to_array_uses_exterior_ring(self):
        wkt = "POLYGON ((0 0, 10 0, 10 10, 0 0), (1 1, 2 1, 2 2, 1 1))"

        assert wkt_to_array(wkt) == [[0, 0], [10, 0], [10, 10], [0, 0]]

    def test_multipolygon_to_array_uses_first_polygon(self):
        wkt = "MULTIPOLYGON (((1 1, 2 1, 2 2, 1 1)), ((5 5, 6 5, 6 6, 5 5)))"

        assert wkt_to_array(wkt) == [[1, 1], [2, 1], [2, 2], [1, 1]]

    def test_point_to_array(self):
        assert wkt_to_array("POINT (4.4 51.2)") == [[4.4, 51.2]]

    def test_linestring_to_array(self):
        assert wkt_to_array("LINESTRING (0 0, 1 1, 2 2)") == [[0, 0], [1, 1], [2, 2]]

    @pytest.mark.parametrize("wkt", ["NOT WKT", "POLYGON EMPTY"])
    def test_unusable_geometry_reports_error(self, wkt):
        assert wkt_to_geojson(wkt) == "error"
        assert wkt_to_array(wkt) == "error"

    def test_unsupported_geometry_type_array(self):
        assert wkt_to_array("MULTIPOINT ((0 0), (1 1))") == "error"


class TestZonePortCatalog:
    """Lookup and keyword search."""

    def test_loads_once(self, fake_s3_client):
        catalog = ZonePortCatalog("bucket", "data/zones-ports.csv", s3_client=fake_s3_client)

        catalog.get("1001")
        catalog.get("1003")
        catalog.search("port")

        fake_s3_client.get_object.assert_called_once_with(Bucket="bucket", Key="data/zones-ports.csv")
        assert catalog.is_loaded

    def test_get_enriches_geometry(self, fake_s3_client):
        catalog = ZonePortCatalog("bucket", "key", s3_client=fake_s3_client)

        record = catalog.get("1001")

        assert record["name"] == "Rotterdam"
        assert record["geometry_wkt"].startswith("POLYGON")
        assert json.loads(record["geometry_geojson"])["type"] == "Polygon"
        assert record["geometry_array"][0] == [4, 51]

    def test_get_bad_geometry_reports_error(self, fake_s3_client):
        record = ZonePortCatalog("bucket", "key", s3_client=fake_s3_client).get("1004")

        assert record["geometry_geojson"] == "error"
        assert record["geometry_array"] == "error"

    def test_get_unknown_id(self, fake_s3_client):
        assert ZonePortCatalog("bucket", "key", s3_client=fake_s3_client).get("9999") is None

    def test_get_returns_copy(self, fake_s3_client):
        catalog = ZonePortCatalog("bucket", "key", s3_client=fake_s3_client)

        catalog.get("1001")["name"] = "changed"

        assert catalog.get("1001")["name"] == "Rotterdam"

    def test_search_splits_ports_and_zones(self, fake_s3_client):
        result = ZonePortCatalog("bucket", "key", s3_client=fake_s3_client).search("o")

        port_ids = [record["zone_id"] for record in result["data"]["ports"]]
        zone_ids = [record["zone_id"] for record in result["data"]["zones"]]
        assert port_ids == ["1001", "1003"]
        assert zone_ids == ["1002", "1004"]
        assert result["meta"] == {"keyword": "o", "totalRecords": 4, "totalPorts": 2, "totalZones": 2}

    def test_search_is_case_insensitive_and_drops_wkt(self, fake_s3_client):
        result = ZonePortCatalog("bucket", "key", s3_client=fake_s3_client).search("nlrtm")

        assert result["meta"]["totalRecords"] == 1
        port = result["data"]["ports"][0]
        assert port["name"] == "Rotterdam"
        assert "geometry_wkt" not in port

    def test_search_without_match(self, fake_s3_client):
        result = ZonePortCatalog("bucket", "key", s3_client=fake_s3_client).search("atlantis")

        assert result["meta"]["totalRecords"] == 0
        assert result["data"] == {"ports": [], "zones": []}

    def test_reads_csv_from_s3(self, zones_csv):
        with mock_aws():
            s3 = boto3.client("s3", region_name="us-east-1")
            s3.create_bucket(Bucket="test-geodata-bucket")
            s3.put_object(Bucket="test-geodata-bucket", Key="data/zones-ports.csv", Body=zones_csv.encode("utf-8"))

            catalog = get_catalog()

            assert catalog.get("1003")["unlocode"] == "BEANR"
            assert get_catalog() is catalog
