import json
import pytest
from walkout.utils.composite_key import composite_key, item_key
from walkout.utils.extract_line_items import parse_payloads, extract_from_office, extract_from_lc3
from walkout.utils.errors import InvalidInputError, EmptyDataError
from walkout.utils.models import MatchRecord


class TestCompositeKey:
    """Order-insensitive tooth/surface identity"""

    def test_order_insensitive(self):
        assert composite_key("A", "B") == composite_key("B", "A")
        assert composite_key("12", "MO") == composite_key("MO", "12")

    def test_missing_values_default_to_empty(self):
        assert composite_key(None, None) == ""
        assert composite_key("3", None) == composite_key("3", "") == "3"

    def test_no_case_normalization(self):
        assert composite_key("12", "mo") != composite_key("12", "MO")

    def test_item_key_works_for_line_items_and_records(self, office_item):
        record = MatchRecord(service="D2391", service_match=False, tooth_surface_match=False,
                             match=False, tooth="O", surface="14")
        assert item_key(office_item("D2391", "14", "O")) == item_key(record)


class TestParsePayloads:

    def test_normalizes_both_shapes(self, office_payload, lc3_payload):
        office, lc3 = parse_payloads(
            office_payload(("D0150", "12", "O")),
            lc3_payload(("D0150", "12", "O"), ("D1110", "", ""))
        )

        assert [(i.service_code, i.tooth, i.surface, i.source) for i in office] == [("D0150", "12", "O", "office")]
        assert [i.service_code for i in lc3] == ["D0150", "D1110"]
        assert all(i.source == "lc3" for i in lc3)
        assert lc3[0].raw["Description"]["text"] == "lc3 line"

    def test_accepts_bytes(self, office_payload, lc3_payload):
        office, lc3 = parse_payloads(
            office_payload(("D0150", "12", "O")).encode(),
            lc3_payload(("D0150", "12", "O")).encode()
        )
        assert len(office) == len(lc3) == 1

    @pytest.mark.parametrize("office_data,lc3_data", [
        ("not json", json.dumps({"data": [{"Service": "D0150"}]})),
        (json.dumps({"data": [{"Service": "D0150"}]}), "{broken"),
        (None, json.dumps({"data": [{"Service": "D0150"}]})),
    ])
    def test_invalid_json(self, office_data, lc3_data):
        with pytest.raises(InvalidInputError) as exc:
            parse_payloads(office_data, lc3_data)
        assert exc.value.to_response()["message"] == "Invalid JSON data"
        assert "error" in exc.value.to_response()

    @pytest.mark.parametrize("office_data", [
        json.dumps({"data": []}),
        json.dumps({"items": [{"Service": "D0150"}]}),
        json.dumps({"data": "D0150"}),
        json.dumps([{"Service": "D0150"}]),
    ])
    def test_empty_data(self, office_data, lc3_payload):
        with pytest.raises(EmptyDataError) as exc:
            parse_payloads(office_data, lc3_payload(("D0150", "12", "O")))
        assert exc.value.to_response() == {
            "success": False,
            "message": "No data found in one or both sources",
        }

    def test_malformed_items_are_tolerated(self):
        office = extract_from_office([{"Tooth": 12}, "garbage"])
        lc3 = extract_from_lc3([{"Description": "D0150"}, {"Description": {"service_code": None}}])

        assert office[0].service_code == "" and office[0].tooth == "12"
        assert office[1].service_code == ""
        assert [i.service_code for i in lc3] == ["", ""]
