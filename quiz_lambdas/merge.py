from .dates import now_iso


def merge_by_key(existing, incoming, key, created_field, now=None):
    """Upsert each incoming record into a copy of ``existing`` by ``key``.

    Matching records are overlaid (incoming fields win) keeping their original
    ``created_field``; the rest are appended. Returns
    ``(merged, added_keys, updated_keys)``.
    """
    now = now or now_iso()
    merged = [dict(r) for r in existing or []]
    added, updated = [], []

    for record in incoming:
        k = record[key]
        idx = next((i for i, r in enumerate(merged) if r.get(key) == k), None)
        if idx is not None:
            current = merged[idx]
            merged[idx] = {
                **current,
                **record,
                created_field: current.get(created_field) or now,
                'updatedAt': now,
            }
            updated.append(k)
        else:
            merged.append({**record, created_field: now, 'updatedAt': now})
            added.append(k)

    return merged, added, updated


def merge_questions(existing, incoming, now=None):
    merged, added, updated = merge_by_key(existing, incoming, 'questionId', 'createdAt', now)
    for q in merged:
        if q['questionId'] in updated and 'correctAnswers' in q:
            q.pop('correctAnswer', None)
    return merged, added, updated


def merge_users(existing, incoming, now=None):
    return merge_by_key(existing, incoming, 'userName', 'addedAt', now)
