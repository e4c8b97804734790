import copy

from childcare_qa.client import TransportFailure
from childcare_qa.messages import (
    Citation,
    ClarifyingQuestions,
    CostData,
    GenericData,
    Outcome,
    Role,
)
from childcare_qa.normalizer import (
    as_mapping,
    as_number,
    classify_data,
    network_error_message,
    normalize_response,
    opt_str,
)

COST_REPLY = {
    "intent": "COST",
    "data": {
        "state": "PA",
        "county_fips": "42003",
        "county": "Allegheny County",
        "queries": [{"age_group": "infant", "setting": "center", "metric": "median", "units": "weekly"}],
        "answers": [
            {
                "age_group": "infant",
                "setting": "center",
                "weekly": {"median": 310.5, "p75": None},
                "monthly": {"median": 1345, "p75": 1500},
            }
        ],
        "notes": ["Prices are 2022 dollars."],
        "citations": ["NDCP 2022"],
    },
}


def test_answer_wins_over_raw():
    msg = normalize_response({"answer": "Ratio is 1:4.", "raw": "ignored"})
    assert msg.role is Role.ASSISTANT
    assert msg.outcome is Outcome.ANSWER
    assert msg.content == "Ratio is 1:4."
    assert msg.citations == ()
    assert msg.providers is None
    assert msg.data is None


def test_raw_verbatim():
    msg = normalize_response({"raw": "  plain backend text\n"})
    assert msg.outcome is Outcome.RAW
    assert msg.content == "  plain backend text\n"
    assert msg.citations == () and msg.providers is None and msg.data is None


def test_error_embeds_backend_error():
    msg = normalize_response({"error": "Region not supported"})
    assert msg.outcome is Outcome.ERROR
    assert "Region not supported" in msg.content
    assert msg.content.startswith("Sorry—something went wrong.")


def test_error_without_detail_is_unknown():
    assert "Unknown error" in normalize_response({}).content
    assert "Unknown error" in normalize_response({"answer": "", "raw": ""}).content


def test_non_object_reply_degrades_to_error():
    for reply in (None, [], "oops", 42):
        msg = normalize_response(reply)
        assert msg.outcome is Outcome.ERROR
        assert "Unknown error" in msg.content


def test_cost_content_is_synthesized():
    msg = normalize_response(COST_REPLY)
    assert msg.content == "Estimated childcare prices for Allegheny County, PA"
    assert isinstance(msg.payload, CostData)
    assert msg.cost.county_fips == "42003"
    assert msg.cost.answers[0].weekly.median == 310.5
    assert msg.cost.answers[0].weekly.p75 is None
    assert msg.cost.queries[0].metric == "median"
    assert msg.data == COST_REPLY["data"]


def test_data_without_cost_intent_gets_generic_content():
    msg = normalize_response({"data": {"clarifying_questions": ["Household size?", "Monthly income?"]}})
    assert msg.content == "Here you go:"
    assert isinstance(msg.payload, ClarifyingQuestions)
    assert msg.clarifying_questions == ("Household size?", "Monthly income?")


def test_answer_text_preferred_over_synthesized():
    reply = dict(COST_REPLY, answer="Infant care in Allegheny is about $310/week.")
    assert normalize_response(reply).content == "Infant care in Allegheny is about $310/week."


def test_providers_attached_only_for_lists():
    reply = {
        "answer": "Found 2 providers.",
        "providers": [
            {"name": "Little Steps", "city": "Pittsburgh", "last_seen": "2024-05-01"},
            "not-a-provider",
            {"name": "Little Steps", "city": "Pittsburgh"},
        ],
    }
    msg = normalize_response(reply)
    assert [p.name for p in msg.providers] == ["Little Steps", "Little Steps"]
    assert msg.providers[0].address is None

    assert normalize_response({"answer": "x", "providers": {"name": "A"}}).providers is None
    assert normalize_response({"answer": "x", "providers": []}).providers == ()


def test_citations_keep_backend_order():
    reply = {
        "answer": "See regs.",
        "citations": [
            {"title": "55 Pa. Code 3270", "url": "https://example.org/3270"},
            {"url": "https://example.org/faq"},
            "Bare title",
            7,
        ],
    }
    msg = normalize_response(reply)
    assert msg.citations == (
        Citation(title="55 Pa. Code 3270", url="https://example.org/3270"),
        Citation(url="https://example.org/faq"),
        Citation(title="Bare title"),
    )


def test_malformed_cost_members_do_not_raise():
    reply = {
        "intent": "COST",
        "data": {"answers": [None, {"age_group": "toddler", "weekly": "n/a", "monthly": {"median": "1200"}}]},
    }
    msg = normalize_response(reply)
    assert msg.content == "Estimated childcare prices for unknown county, unknown state"
    (answer,) = msg.cost.answers
    assert answer.setting == ""
    assert answer.weekly.median is None
    assert answer.monthly.median is None


def test_classify_data_variants():
    assert classify_data(None) is None
    assert classify_data({}) is None
    assert classify_data(["x"]) is None
    assert isinstance(classify_data({"answers": []}), CostData)
    assert classify_data({"clarifying_questions": []}) == ClarifyingQuestions(questions=())
    assert classify_data({"eligible": True}) == GenericData(keys=("eligible",))


def test_normalization_is_idempotent():
    reply = copy.deepcopy(COST_REPLY)
    reply["providers"] = [{"name": "A"}]
    first = normalize_response(reply)
    second = normalize_response(reply)
    assert first == second
    assert reply == dict(COST_REPLY, providers=[{"name": "A"}])


def test_data_is_copied_not_aliased():
    reply = copy.deepcopy(COST_REPLY)
    msg = normalize_response(reply)
    reply["data"]["county"] = "changed"
    assert msg.data["county"] == "Allegheny County"


def test_network_error_message():
    msg = network_error_message(TransportFailure("timed out"))
    assert msg.content == "Network error: timed out"
    assert msg.outcome is Outcome.NETWORK
    assert msg.citations == () and msg.providers is None and msg.data is None
    assert network_error_message(TimeoutError()).content == "Network error: TimeoutError"


def test_cost_data_keeps_clarifying_questions():
    msg = normalize_response(
        {
            "intent": "COST",
            "data": {"state": "PA", "answers": [], "clarifying_questions": ["Household size?"]},
        }
    )
    assert isinstance(msg.payload, CostData)
    assert msg.cost is not None
    assert msg.clarifying_questions == ("Household size?",)


def test_falsy_data_kept_as_sent():
    msg = normalize_response({"answer": "ok", "data": {}})
    assert msg.data == {}
    assert msg.payload is None
    assert normalize_response({"answer": "ok", "data": []}).data == []
    assert normalize_response({"answer": "ok", "data": 0}).data == 0
    assert normalize_response({"answer": "ok"}).data is None


def test_field_readers():
    assert as_mapping({"a": 1}) == {"a": 1}
    assert as_mapping(["a"]) == {}
    assert opt_str(42003) == "42003"
    assert opt_str(True) is None
    assert opt_str({"x": 1}) is None
    assert as_number(1345) == 1345
    assert as_number(True) is None
    assert as_number("12") is None
