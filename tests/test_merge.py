import pytest

from quiz_lambdas.merge import merge_by_key, merge_questions, merge_users

NOW = "2024-05-01T12:00:00+00:00"
EARLIER = "2024-01-01T00:00:00+00:00"


def _q(qid, **extra):
    return dict({"questionId": qid, "questionText": f"text {qid}"}, **extra)


@pytest.mark.parametrize("existing_keys, incoming_keys", [
    ([], []),
    ([], ["a", "b"]),
    (["a", "b"], []),
    (["a", "b"], ["b", "c"]),
    (["a", "b", "c"], ["c", "a"]),
])
def test_merge_partitions_keys(existing_keys, incoming_keys):
    existing = [_q(k, createdAt=EARLIER) for k in existing_keys]
    incoming = [_q(k) for k in incoming_keys]

    merged, added, updated = merge_by_key(existing, incoming, "questionId", "createdAt", NOW)

    keys = [q["questionId"] for q in merged]
    assert set(keys) == set(existing_keys) | set(incoming_keys)
    assert len(keys) == len(set(keys))
    assert set(updated) == set(existing_keys) & set(incoming_keys)
    assert set(added) == set(incoming_keys) - set(existing_keys)
    for q in merged:
        if q["questionId"] not in incoming_keys:
            assert q == _q(q["questionId"], createdAt=EARLIER)


def test_merge_keeps_existing_order_and_appends():
    existing = [_q("a"), _q("b")]
    merged, _, _ = merge_by_key(existing, [_q("c"), _q("a")], "questionId", "createdAt", NOW)
    assert [q["questionId"] for q in merged] == ["a", "b", "c"]


def test_updated_question_keeps_created_at():
    existing = [_q("q1", createdAt=EARLIER, updatedAt=EARLIER, questionText="old")]
    merged, added, updated = merge_questions(existing, [_q("q1", questionText="new")], NOW)

    assert [q["questionId"] for q in merged] == ["q1"]
    assert merged[0]["questionText"] == "new"
    assert merged[0]["createdAt"] == EARLIER
    assert merged[0]["updatedAt"] == NOW
    assert (added, updated) == ([], ["q1"])


def test_updated_record_without_created_at_is_stamped():
    merged, _, _ = merge_questions([_q("q1")], [_q("q1")], NOW)
    assert merged[0]["createdAt"] == NOW


def test_new_question_is_stamped():
    merged, added, _ = merge_questions([], [_q("q1")], NOW)
    assert merged[0]["createdAt"] == NOW
    assert merged[0]["updatedAt"] == NOW
    assert added == ["q1"]


def test_merge_does_not_touch_input():
    existing = [_q("q1", createdAt=EARLIER)]
    merge_questions(existing, [_q("q1", questionText="new")], NOW)
    assert existing == [_q("q1", createdAt=EARLIER)]


def test_merged_question_drops_legacy_answer():
    existing = [_q("q1", correctAnswer="Paris", createdAt=EARLIER)]
    merged, _, _ = merge_questions(existing, [_q("q1", correctAnswers=[0])], NOW)
    assert "correctAnswer" not in merged[0]
    assert merged[0]["correctAnswers"] == [0]


def test_merge_users_overlays_supplied_fields():
    existing = [{"userName": "ann", "score": 3, "avatar": "cat.png", "addedAt": EARLIER}]
    merged, added, updated = merge_users(existing, [{"userName": "ann", "score": 10}], NOW)

    assert merged == [{
        "userName": "ann", "score": 10, "avatar": "cat.png",
        "addedAt": EARLIER, "updatedAt": NOW,
    }]
    assert (added, updated) == ([], ["ann"])


def test_merge_users_appends_new_user():
    merged, added, updated = merge_users(None, [{"userName": "bob"}], NOW)
    assert merged == [{"userName": "bob", "addedAt": NOW, "updatedAt": NOW}]
    assert (added, updated) == (["bob"], [])
