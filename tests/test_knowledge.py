import json

from access_audit.client.knowledge import JsonKnowledgeBase


def test_bundled_knowledge_base_has_common_rules():
    kb = JsonKnowledgeBase()
    record = kb.lookup("image-alt")

    assert "image-alt" in kb
    assert record.rule_id == "image-alt"
    assert record.issue_explanation
    assert record.fixes
    assert record.resources[0].url.startswith("https://")


def test_unknown_rule_returns_none():
    assert JsonKnowledgeBase().lookup("not-a-rule") is None


def test_missing_file_behaves_like_empty_base(tmp_path):
    kb = JsonKnowledgeBase(tmp_path / "missing.json")
    assert kb.lookup("image-alt") is None
    assert "image-alt" not in kb


def test_unreadable_file_behaves_like_empty_base(tmp_path):
    path = tmp_path / "kb.json"
    path.write_text("{broken", encoding="utf-8")
    assert JsonKnowledgeBase(path).lookup("image-alt") is None


def test_sparse_record_fills_defaults(tmp_path):
    path = tmp_path / "kb.json"
    path.write_text(
        json.dumps(
            {
                "bypass": {
                    "issue_explanation": "No skip link",
                    "impact": "Keyboard users tab through the whole header",
                    "technical_analysis": "No skip link or landmark",
                    "fixes": ["Add a skip link"],
                    "resources": [{"url": "https://example.com/skip"}, {"title": "no url"}],
                }
            }
        ),
        encoding="utf-8",
    )
    record = JsonKnowledgeBase(path).lookup("bypass")

    assert record.impact_description == "Keyboard users tab through the whole header"
    assert record.failure_conditions == "No skip link or landmark"
    assert record.fixes[0].step == "Add a skip link"
    assert [resource.url for resource in record.resources] == ["https://example.com/skip"]
    assert record.code_before is None
