"""Token substitution and template loading."""
import pytest

from reporting.templating import TemplateNotFoundError, fill_template, load_template, substitute_tokens


def test_fill_template_basic_and_missing() -> None:
    assert fill_template("Hello {{name}}", {"name": "Bo"}) == "Hello Bo"
    assert fill_template("{{missing}}", {}) == ""
    assert fill_template("Hello {{ name }}!", {"name": "Bo"}) == "Hello Bo!"


@pytest.mark.parametrize("values", [{}, {"name": "Bo"}, {"x": "{{name}}"}])
def test_template_without_tokens_is_unchanged(values) -> None:
    text = "Bail sans variable.\nDeuxième ligne { pas un jeton }."
    assert fill_template(text, values) == text


def test_substitute_tokens_records_values_in_order_with_duplicates() -> None:
    body, dynamic = substitute_tokens(
        "{{a}} puis {{b}}, encore {{a}} et {{vide}}{{absent}}",
        {"a": "Diop", "b": "10", "vide": ""},
    )
    assert body == "Diop puis 10, encore Diop et "
    assert dynamic == ["Diop", "10", "Diop"]


def test_tokens_match_non_greedily() -> None:
    assert fill_template("{{a}}{{b}}", {"a": "1", "b": "2"}) == "12"


def test_load_template_reads_from_override_dir_on_every_call(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("DOCUMENT_TEMPLATES_DIR", str(tmp_path))
    (tmp_path / "t.txt").write_text("v1 {{x}}", encoding="utf-8")
    assert load_template("t.txt") == "v1 {{x}}"
    (tmp_path / "t.txt").write_text("v2 {{x}}", encoding="utf-8")
    assert load_template("t.txt") == "v2 {{x}}"


def test_load_template_missing_raises(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("DOCUMENT_TEMPLATES_DIR", str(tmp_path))
    with pytest.raises(TemplateNotFoundError):
        load_template("absent.txt")


def test_bundled_templates_exist() -> None:
    for name in ("contrat_location.txt", "mandat_gerance.txt", "quittance_loyer.txt", "report.html"):
        assert load_template(name).strip()
