from __future__ import annotations

import orjson

from jsondeck.core.validate import SCHEMA_PATH, validate_document, validate_document_file


class TestSchemaValidation:

    def test_schema_is_bundled(self):
        assert SCHEMA_PATH.is_file()

    def test_sample_conforms(self, sample_raw):
        assert validate_document(sample_raw) == []

    def test_missing_required_metadata(self, sample_raw):
        del sample_raw["presentation"]["metadata"]["author"]
        errs = validate_document(sample_raw)
        assert len(errs) == 1
        assert errs[0].startswith("- $['presentation']['metadata']:")
        assert "'author' is a required property" in errs[0]

    def test_reports_item_paths(self, sample_raw):
        item = sample_raw["presentation"]["pages"][0]["content"][0]
        item["content"]["gridArea"]["columnStart"] = 0
        errs = validate_document(sample_raw)
        assert any(
            e.startswith("- $['presentation']['pages'][0]['content'][0]['content']['gridArea']['columnStart']:")
            for e in errs
        )

    def test_rejects_unknown_type_and_theme(self, sample_raw):
        sample_raw["presentation"]["metadata"]["theme"] = "neon"
        sample_raw["presentation"]["pages"][1]["content"][0]["type"] = "hologram"
        errs = validate_document(sample_raw)
        assert len(errs) == 2

    def test_legacy_box_lengths(self, sample_raw):
        item = sample_raw["presentation"]["pages"][0]["content"][1]
        item["content"]["box"] = {"x": "10%", "y": 1, "width": "4in", "height": "50%"}
        assert validate_document(sample_raw) == []
        item["content"]["box"]["x"] = "wide"
        assert len(validate_document(sample_raw)) == 1

    def test_file_helpers(self, tmp_path, sample_raw):
        missing = tmp_path / "none.json"
        assert validate_document_file(missing)[0].startswith("[ERR] instance not found")

        bad = tmp_path / "bad.json"
        bad.write_text("{nope", encoding="utf-8")
        assert validate_document_file(bad)[0].startswith("[ERR] invalid JSON")

        good = tmp_path / "good.json"
        good.write_bytes(orjson.dumps(sample_raw))
        assert validate_document_file(good) == []
