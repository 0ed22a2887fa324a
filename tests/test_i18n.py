import pytest

from webapp.errors import DEFAULT_MESSAGES, ValidationCode, ValidationError
from webapp.i18n import Translator, load_catalogs
from webapp.models import UserConfig
from webapp.userconfigs import UserConfigService


@pytest.fixture()
def translator():
    return Translator.from_directory()


def test_bundled_languages(translator):
    assert translator.available_languages == ("de", "en")
    assert translator.translate("de", "language_name") == "Deutsch"


def test_catalogs_cover_the_same_keys():
    catalogs = load_catalogs()
    assert set(catalogs["de"]) == set(catalogs["en"])


def test_english_errors_match_exception_text(translator):
    for code in ValidationCode:
        err = ValidationError(code)
        assert translator.translate("en", err.message_key) == DEFAULT_MESSAGES[code] == str(err)


def test_translate_falls_back_to_default_then_key(tmp_path):
    (tmp_path / "en.yaml").write_text("greeting: Hello {name}\nonly_en: x\n", encoding="utf-8")
    (tmp_path / "de.yaml").write_text("greeting: Hallo {name}\n", encoding="utf-8")
    t = Translator.from_directory(tmp_path)
    assert t.translate("de", "greeting", name="Ada") == "Hallo Ada"
    assert t.translate("de", "only_en") == "x"
    assert t.translate("de", "missing.key") == "missing.key"
    # Missing parameters leave the template untouched.
    assert t.translate("en", "greeting", other=1) == "Hello {name}"


def test_resolve_order(translator):
    cfg = UserConfig(user_id="usr_1", language="de")
    assert translator.resolve(None, None).language == "en"
    assert translator.resolve(None, cfg).language == "de"
    assert translator.resolve("EN-us", cfg).language == "en"

    choice = translator.resolve("fr", cfg)
    assert choice.language == "en"
    assert "fr" in choice.notice


def test_resolve_with_stale_setting(translator):
    choice = translator.resolve(None, UserConfig(user_id="usr_1", language="it"))
    assert choice.language == "en"
    assert "it" in choice.notice


def test_unknown_default_language_falls_back_to_english(tmp_path):
    (tmp_path / "en.yaml").write_text("a: b\n", encoding="utf-8")
    assert Translator.from_directory(tmp_path, "xx").default_language == "en"


def test_userconfig_defaults_are_not_persisted(file_stores, translator):
    service = UserConfigService(file_stores.userconfigs, translator)
    cfg = service.find_or_default("usr_1")
    assert cfg == UserConfig(user_id="usr_1", language="en", dark_mode=False)
    assert file_stores.userconfigs.find("usr_1") is None
    assert service.delete_for("usr_1") is False


def test_userconfig_update_validates_language(file_stores, translator):
    service = UserConfigService(file_stores.userconfigs, translator)
    cfg = service.find_or_default("usr_1")

    updated = service.update(cfg, " DE ", True)
    assert updated == UserConfig(user_id="usr_1", language="de", dark_mode=True)

    with pytest.raises(ValidationError) as excinfo:
        service.update(cfg, "xx", False)
    assert excinfo.value.code == ValidationCode.LANGUAGE_UNAVAILABLE

    file_stores.userconfigs.save(updated)
    assert service.delete_for("usr_1") is True
    assert file_stores.userconfigs.find("usr_1") is None
