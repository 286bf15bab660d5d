"""
Tests for the catalog load pipeline (local files and HTTP sources).

Run with: pytest tests/test_pipeline.py -v
"""

import asyncio

import httpx
import pytest

from config.settings import LoggingConfig, PipelineConfig, SourceConfig
from src.errors import SourceUnavailable
from src.pipeline import CatalogPipeline, load_catalog


def http_config(base_url: str = "https://cdn.example.com/data") -> PipelineConfig:
    return PipelineConfig(
        sources=SourceConfig(base_url=base_url),
        logging=LoggingConfig(log_level="WARNING"),
    )


def static_transport(data_dir, missing=(), status=404) -> httpx.MockTransport:
    """Serve files from data_dir; names in `missing` get `status`."""

    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        path = data_dir / name
        if name in missing or not path.exists():
            return httpx.Response(status)
        return httpx.Response(200, text=path.read_text(encoding="utf-8"))

    return httpx.MockTransport(handler)


class TestLocalLoad:
    """Loading the sample sources from a directory."""

    def test_base_products_joined(self, snapshot):
        tiers = {b.code: b.tier for b in snapshot.base_products}
        assert tiers == {
            "3001U": "std",  # per-code override
            "STTU169": "mid",  # brand default
            "5001T": "premium",  # explicit row tier
            "3413": "mid",
            "3501": "std",
            "18500": "std",
            "4062": "premium",
            "64000": "std",
        }

    def test_blank_trailing_row_dropped(self, snapshot):
        assert len(snapshot.base_products) == 8
        assert all(b.code for b in snapshot.base_products)

    def test_active_filter_and_category_order(self, snapshot):
        assert len(snapshot.active_base_products) == 7
        assert snapshot.categories() == ["short_tee", "long_tee", "hoodie", "crop"]
        assert [b.code for b in snapshot.bases_for_category("short_tee")] == [
            "3001U",
            "STTU169",
            "5001T",
            "3413",
        ]

    def test_coerced_fields(self, snapshot):
        base = snapshot.get_base("STTU169")
        assert base.organic is True  # "TRUE"
        assert base.retail_price == 42.5
        assert snapshot.get_base("5001T").fit_notes == 'Midweight, "clean drape"'

    def test_active_variants(self, snapshot):
        skus = [v.sku for v in snapshot.active_variants()]
        assert skus == [
            "AF-TEE-3001U-LS-LIGHT-M",
            "AF-TEE-3001U-LS-LIGHT-L",
            "AF-TEE-STTU169-BAUHAUS-DARK-M",
            "AF-TEE-4062-W-CROP-LOGO-M",
        ]
        assert len(snapshot.active_variants("3001U")) == 2
        assert snapshot.active_variants("64000") == []

    def test_variant_search(self, snapshot):
        assert [v.sku for v in snapshot.active_variants(query="BAUHAUS")] == ["AF-TEE-STTU169-BAUHAUS-DARK-M"]
        # brand of the parent base; the disabled 5001T variant stays out
        assert [v.sku for v in snapshot.active_variants(query="as colour")] == ["AF-TEE-4062-W-CROP-LOGO-M"]
        assert len(snapshot.active_variants(query="white")) == 3
        assert len(snapshot.active_variants("3001U", query=" white ")) == 2
        assert snapshot.active_variants(query="softstyle") == []
        assert len(snapshot.active_variants(query="")) == 4

    def test_descriptions_and_meta(self, snapshot):
        assert set(snapshot.descriptions) == {"3001U", "STTU169", "5001T"}
        assert snapshot.meta.last_updated is not None

    def test_missing_base_products_fails(self, pipeline_config, data_dir):
        (data_dir / "base_products.csv").unlink()
        with pytest.raises(SourceUnavailable) as exc_info:
            load_catalog(pipeline_config)
        assert exc_info.value.source == "base_products.csv"

    def test_missing_tier_tables_degrade(self, pipeline_config, data_dir):
        (data_dir / "tier_map.csv").unlink()
        (data_dir / "brand_tier_map.csv").unlink()
        snapshot = load_catalog(pipeline_config)
        assert snapshot.get_base("3001U").tier == ""
        assert snapshot.get_base("5001T").tier == "premium"

    def test_missing_optional_json(self, pipeline_config, data_dir):
        (data_dir / "descriptions.json").unlink()
        (data_dir / "meta.json").unlink()
        snapshot = load_catalog(pipeline_config)
        assert snapshot.descriptions == {}
        assert snapshot.meta.last_updated is None

    def test_malformed_descriptions_ignored(self, pipeline_config, data_dir):
        (data_dir / "descriptions.json").write_text("{not json", encoding="utf-8")
        assert load_catalog(pipeline_config).descriptions == {}

    def test_exclusions_reset_between_loads(self, pipeline_config, data_dir):
        with open(data_dir / "base_products.csv", "a", encoding="utf-8") as f:
            f.write("3001U,Dup,,Duplicate Tee,short_tee,,false,false,true,1,\n")
        pipeline = CatalogPipeline(pipeline_config)
        asyncio.run(pipeline.load())
        asyncio.run(pipeline.load())
        assert [o.reason for o in pipeline.transformer.excluded] == ["duplicate code 3001U"]

    def test_products_required_for_inventory(self, pipeline_config, data_dir):
        (data_dir / "products.csv").unlink()
        with pytest.raises(SourceUnavailable):
            load_catalog(pipeline_config)
        snapshot = load_catalog(pipeline_config, include_variants=False)
        assert snapshot.variants == ()


class TestHttpLoad:
    """Sources fetched over HTTP through httpx."""

    def test_load_over_http(self, data_dir):
        snapshot = load_catalog(http_config(), transport=static_transport(data_dir))
        assert snapshot.get_base("3001U").tier == "std"
        assert len(snapshot.active_variants()) == 4

    def test_failure_status_fails_whole_load(self, data_dir):
        transport = static_transport(data_dir, missing={"base_products.csv"}, status=500)
        with pytest.raises(SourceUnavailable) as exc_info:
            load_catalog(http_config(), transport=transport)
        assert exc_info.value.source == "base_products.csv"
        assert exc_info.value.status == 500

    def test_optional_404_degrades(self, data_dir):
        transport = static_transport(data_dir, missing={"tier_map.csv", "meta.json"})
        snapshot = load_catalog(http_config(), transport=transport)
        # without the per-code override, 3413 falls back to its brand default
        assert snapshot.get_base("3413").tier == "std"
        assert snapshot.meta.last_updated is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
