import pytest
import requests

from errors import KnowledgeLookupError
from knowledge import KnowledgeLookup, to_knowledge
from fakes import FakeResponse, FakeSession


def _entry(rela, class_type, name):
    return {"rela": rela, "rxclassMinConceptItem": {"classType": class_type, "className": name}}


def _classes(*entries):
    return {"rxclassDrugInfoList": {"rxclassDrugInfo": list(entries)}}


IBUPROFEN_CLASSES = _classes(
    _entry("has_moa", "MOA", " Cyclooxygenase Inhibitors "),
    _entry("may_treat", "DISEASE", "Pain"),
    _entry("may_treat", "DISEASE", "Fever"),
    _entry("may_treat", "DISEASE", "Pain"),
    _entry("may_prevent", "DISEASE", "Dysmenorrhea"),
    _entry("ci_with", "DISEASE", "Peptic Ulcer"),
    _entry("ci_with", "CHEM", "Aspirin"),
)


class TestToKnowledge:

    def test_extracts_mechanism_indications_contraindications(self):
        snippet = to_knowledge(IBUPROFEN_CLASSES)
        assert snippet.mechanism == "Cyclooxygenase Inhibitors"
        assert snippet.indications == ["Pain", "Fever", "Dysmenorrhea"]
        assert snippet.contraindications == ["Peptic Ulcer"]

    def test_lists_are_capped(self):
        entries = [_entry("may_treat", "DISEASE", f"Disease {i}") for i in range(8)]
        entries += [_entry("ci_with", "DISEASE", f"Condition {i}") for i in range(8)]
        snippet = to_knowledge(_classes(*entries))
        assert len(snippet.indications) == 5
        assert len(snippet.contraindications) == 4
        assert snippet.mechanism is None

    @pytest.mark.parametrize("response", [None, {}, _classes(), _classes(_entry("has_pe", "PE", "Something"))])
    def test_nothing_useful_is_none(self, response):
        assert to_knowledge(response) is None


class TestKnowledgeLookup:

    def test_full_lookup(self):
        session = FakeSession(
            FakeResponse({"idGroup": {"rxnormId": ["5640"]}}),
            FakeResponse(IBUPROFEN_CLASSES),
        )
        snippet = KnowledgeLookup(base_url="https://rxnav.test/REST", session=session).fetch_knowledge(" ibuprofen ")

        assert snippet.mechanism == "Cyclooxygenase Inhibitors"
        (_, first_url, first_kwargs), (_, second_url, second_kwargs) = session.calls
        assert first_url == "https://rxnav.test/REST/rxcui.json"
        assert first_kwargs["params"] == {"name": "ibuprofen"}
        assert second_url == "https://rxnav.test/REST/rxclass/class/byRxcui.json"
        assert second_kwargs["params"] == {"rxcui": "5640", "relaSource": "MEDRT"}

    def test_unknown_name_stops_after_first_call(self):
        session = FakeSession(FakeResponse({"idGroup": {"name": "nothing"}}))
        assert KnowledgeLookup(session=session).fetch_knowledge("nothing") is None
        assert len(session.calls) == 1

    def test_blank_name_makes_no_request(self):
        session = FakeSession()
        assert KnowledgeLookup(session=session).fetch_knowledge("   ") is None
        assert session.calls == []

    def test_transport_error_is_wrapped(self):
        session = FakeSession(requests.exceptions.ConnectionError("down"))
        with pytest.raises(KnowledgeLookupError):
            KnowledgeLookup(session=session).fetch_knowledge("ibuprofen")

    def test_http_error_is_wrapped(self):
        session = FakeSession(FakeResponse(status_code=503))
        with pytest.raises(KnowledgeLookupError):
            KnowledgeLookup(session=session).fetch_knowledge("ibuprofen")

    def test_invalid_json_is_wrapped(self):
        session = FakeSession(FakeResponse(json_error=ValueError("not json")))
        with pytest.raises(KnowledgeLookupError):
            KnowledgeLookup(session=session).fetch_knowledge("ibuprofen")

    def test_without_session_uses_module_level_get(self, monkeypatch):
        replies = [FakeResponse({"idGroup": {"rxnormId": ["5640"]}}), FakeResponse(IBUPROFEN_CLASSES)]
        urls = []

        def fake_get(url, **kwargs):
            urls.append(url)
            return replies.pop(0)

        monkeypatch.setattr(requests, "get", fake_get)
        lookup = KnowledgeLookup(base_url="https://rxnav.test/REST")
        assert lookup.session is None
        assert lookup.fetch_knowledge("ibuprofen").mechanism == "Cyclooxygenase Inhibitors"
        assert len(urls) == 2
