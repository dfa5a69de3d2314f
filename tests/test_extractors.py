from job_feeds.extractors import (
    extract_feed_fields,
    location_from_categories,
    location_from_text,
    organization_from_byline,
    organization_from_text,
    split_title_on_colon,
    split_trailing_location,
)
from job_feeds.models import FeedItem
from job_feeds.sources import map_feed_item


def test_location_from_duty_station_text():
    item = FeedItem(snippet="Grade: P-3\nDuty Station: Juba, South Sudan\nDeadline: 1 May")
    assert location_from_text(item) == "Juba"


def test_organization_from_text_labels():
    item = FeedItem(content="Organization: World Food Programme\nLocation: Rome")
    assert organization_from_text(item) == "World Food Programme"
    assert location_from_text(item) == "Rome"


def test_text_extractors_return_none_without_labels():
    item = FeedItem(snippet="We are hiring a field coordinator.")
    assert location_from_text(item) is None
    assert organization_from_text(item) is None


def test_byline_and_categories():
    assert organization_from_byline(FeedItem(byline="  Save the Children ")) == "Save the Children"
    assert organization_from_byline(FeedItem()) is None
    assert location_from_categories(FeedItem(categories=["UNHCR"])) is None
    assert location_from_categories(FeedItem(categories=["UNHCR", "Kenya"])) == "Kenya"


def test_title_splitting_helpers():
    assert split_title_on_colon("UNICEF: Education Specialist") == ("UNICEF", "Education Specialist")
    assert split_title_on_colon("No colon here") is None
    assert split_title_on_colon(": missing prefix") is None
    assert split_trailing_location("Education Specialist, Nairobi") == ("Education Specialist", "Nairobi")
    assert split_trailing_location("Officer, " + "x" * 41) is None


def test_colon_rule_prefers_category_over_title_prefix():
    item = FeedItem(title="Policy Officer: Geneva, CH", categories=["UNHCR"])
    fields = extract_feed_fields(item, "colon")
    assert fields == {"title": "Geneva, CH", "organization": "UNHCR", "location": None}


def test_colon_rule_end_to_end_record():
    item = FeedItem(
        title="Policy Officer: Geneva, CH",
        link="https://unjobs.org/vacancies/1",
        guid="https://unjobs.org/vacancies/1",
        categories=["UNHCR"],
        snippet="Apply before the deadline.",
    )
    job = map_feed_item("unjobs", item, 0, "colon")
    assert job.organization == "UNHCR"
    assert job.title == "Geneva, CH"
    assert job.location == "Location not specified"
    assert job.tags == ["UNHCR"]


def test_colon_rule_uses_prefix_without_categories():
    fields = extract_feed_fields(FeedItem(title="WHO: Technical Officer"), "colon")
    assert fields["organization"] == "WHO"
    assert fields["title"] == "Technical Officer"


def test_colon_location_rule():
    item = FeedItem(title="UNICEF: Education Specialist, Nairobi")
    fields = extract_feed_fields(item, "colon_location")
    assert fields == {"title": "Education Specialist", "organization": "UNICEF", "location": "Nairobi"}


def test_body_text_wins_over_title_heuristics():
    item = FeedItem(
        title="UNICEF: Education Specialist, Nairobi",
        snippet="Duty station: Mombasa\nAgency: UNHCR",
    )
    fields = extract_feed_fields(item, "colon_location")
    assert fields["organization"] == "UNHCR"
    assert fields["location"] == "Mombasa"


def test_plain_rule_keeps_title_intact():
    item = FeedItem(title="Program Manager: Youth", byline="Idealist Org")
    fields = extract_feed_fields(item)
    assert fields == {"title": "Program Manager: Youth", "organization": "Idealist Org", "location": None}
