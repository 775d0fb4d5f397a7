import re

import pytest

from retro.schemas.retro import Stage, UnknownStageError, User
from retro.services.user_presence import present, present_roster
from retro.utils.avatar import normalize_avatar_url

DEFAULT_USER = {
    "given_name": "dylan",
    "online_at": 803,
    "is_facilitator": False,
    "is_typing": False,
    "picture": "http://some/image.jpg?sz=200",
}


def _votes_for(user_id, count):
    return [{"user_id": user_id} for _ in range(count)]


def test_non_facilitator_is_not_labelled_facilitator(now):
    state = present(DEFAULT_USER, Stage.IDEA_GENERATION, [], now)
    assert state.display_name == "dylan"
    assert not re.search(r"facilitator", state.display_name, re.IGNORECASE)


def test_facilitator_is_labelled(now):
    facilitator = {**DEFAULT_USER, "is_facilitator": True}
    state = present(facilitator, Stage.IDEA_GENERATION, [], now)
    assert re.search(r"dylan \(facilitator\)", state.display_name, re.IGNORECASE)


def test_typing_user_shows_three_glyphs_outside_voting(now):
    typing = {**DEFAULT_USER, "is_typing": True}
    state = present(typing, Stage.IDEA_GENERATION, [], now)
    assert len(state.typing_glyphs) == 3
    assert state.is_typing_shown is True


def test_idle_user_shows_no_glyphs(now):
    state = present(DEFAULT_USER, Stage.IDEA_GENERATION, [], now)
    assert state.typing_glyphs == ()
    assert state.is_typing_shown is False


@pytest.mark.parametrize("stage", [Stage.ACTION_ITEMS, Stage.CLOSED])
def test_typing_indicator_shown_in_other_non_voting_stages(now, stage):
    typing = {**DEFAULT_USER, "is_typing": True}
    assert len(present(typing, stage, [], now).typing_glyphs) == 3


def test_typing_indicator_never_shown_while_voting(now):
    typing = {**DEFAULT_USER, "is_typing": True}
    state = present(typing, Stage.VOTING, [], now)
    assert state.typing_glyphs == ()


def test_avatar_size_is_rewritten_to_200(now):
    user = {**DEFAULT_USER, "picture": "http://some/image.jpg?sz=50"}
    state = present(user, Stage.IDEA_GENERATION, [], now)
    assert state.picture_url == "http://some/image.jpg?sz=200"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("http://x/image.jpg?sz=50", "http://x/image.jpg?sz=200"),
        ("http://x/image.jpg?sz=1024", "http://x/image.jpg?sz=200"),
        ("http://x/image.jpg?sz=200", "http://x/image.jpg?sz=200"),
        (
            "https://lh3.example.com/photo.jpg?a=1&sz=50&b=two%20words",
            "https://lh3.example.com/photo.jpg?a=1&sz=200&b=two%20words",
        ),
        ("http://x/image.jpg?size=50", "http://x/image.jpg?size=50"),
        ("http://x/image.jpg", "http://x/image.jpg"),
        (None, None),
    ],
)
def test_normalize_avatar_url(url, expected):
    assert normalize_avatar_url(url) == expected


def test_voting_status_absent_outside_voting(now):
    for stage in (Stage.IDEA_GENERATION, Stage.ACTION_ITEMS, Stage.CLOSED):
        assert present(DEFAULT_USER, stage, [], now).voting_status is None


def test_voting_status_rendered_during_voting(now):
    status = present(DEFAULT_USER, Stage.VOTING, [], now).voting_status
    assert status is not None
    assert status.marker == "allVotesIn"
    assert status.opaque is False


def test_voting_status_opaque_with_five_votes(now):
    user = {**DEFAULT_USER, "id": 999}
    state = present(user, Stage.VOTING, _votes_for(999, 5), now)
    assert state.voting_status.opaque is True


def test_voting_status_not_opaque_with_four_votes(now):
    user = {**DEFAULT_USER, "id": 999}
    state = present(user, Stage.VOTING, _votes_for(999, 4), now)
    assert state.voting_status.opaque is False


def test_missing_votes_treated_as_empty(now):
    user = {**DEFAULT_USER, "id": 999}
    assert present(user, Stage.VOTING, None, now).voting_status.opaque is False


def test_online_duration_from_presence_timestamp(now):
    now_ms = int(now.timestamp() * 1000)
    user = {**DEFAULT_USER, "online_at": now_ms - 1500}
    assert present(user, Stage.IDEA_GENERATION, [], now).online_for_ms == 1500

    without_presence = {key: value for key, value in DEFAULT_USER.items() if key != "online_at"}
    assert present(without_presence, Stage.IDEA_GENERATION, [], now).online_for_ms is None


def test_malformed_stage_fails_fast(now):
    with pytest.raises(UnknownStageError):
        present(DEFAULT_USER, "retro-party", [], now)


def test_present_accepts_user_models(now):
    user = User(id=3, given_name="ana", is_facilitator=True)
    state = present(user, "voting", [], now)
    assert state.display_name == "ana (facilitator)"
    assert state.picture_url is None


def test_present_roster_preserves_order(now):
    users = [
        {**DEFAULT_USER, "id": 1, "given_name": "ana"},
        {**DEFAULT_USER, "id": 2, "given_name": "bo", "is_facilitator": True},
    ]
    entries = present_roster(users, Stage.VOTING, _votes_for(2, 5), now)
    assert [entry.display_name for entry in entries] == ["ana", "bo (facilitator)"]
    assert [entry.voting_status.opaque for entry in entries] == [False, True]


def test_presentation_payload_shape(now):
    typing = {**DEFAULT_USER, "is_typing": True, "online_at": None}
    assert present(typing, Stage.IDEA_GENERATION, [], now).to_payload() == {
        "displayName": "dylan",
        "pictureUrl": "http://some/image.jpg?sz=200",
        "typingGlyphs": ["circle", "circle", "circle"],
        "votingStatus": None,
        "onlineForMs": None,
    }
