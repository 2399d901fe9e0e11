import json
from typing import Any

from cardcatalog.parsers.scryfall import (
    FACE_TEXT_SEPARATOR,
    NormalizeStats,
    SkipReason,
    normalize_card,
    normalize_cards,
    parse_price,
    parse_type_line,
)


def _by_name(records: list[dict[str, Any]], name: str) -> dict[str, Any]:
    return next(r for r in records if r["name"] == name)


class TestParseTypeLine:
    def test_legendary_creature(self) -> None:
        parts = parse_type_line("Legendary Creature — Human Wizard")

        assert parts["supertypes"] == "Legendary"
        assert parts["types"] == "Creature"
        assert parts["subtypes"] == "Human,Wizard"

    def test_multiple_types(self) -> None:
        parts = parse_type_line("Legendary Artifact Creature — Golem")

        assert parts["supertypes"] == "Legendary"
        assert parts["types"] == "Artifact,Creature"
        assert parts["subtypes"] == "Golem"

    def test_no_subtypes(self) -> None:
        parts = parse_type_line("Instant")

        assert parts == {"supertypes": "", "types": "Instant", "subtypes": ""}

    def test_basic_snow_land(self) -> None:
        parts = parse_type_line("Basic Snow Land — Forest")

        assert parts["supertypes"] == "Basic,Snow"
        assert parts["types"] == "Land"
        assert parts["subtypes"] == "Forest"

    def test_unknown_words_dropped(self) -> None:
        """Words outside both vocabularies (e.g. Token) are ignored."""
        parts = parse_type_line("Token Creature — Goblin")

        assert parts["types"] == "Creature"
        assert parts["supertypes"] == ""

    def test_missing_type_line(self) -> None:
        assert parse_type_line(None) == {"supertypes": "", "types": "", "subtypes": ""}
        assert parse_type_line("") == {"supertypes": "", "types": "", "subtypes": ""}

    def test_only_first_two_segments_used(self) -> None:
        parts = parse_type_line("Creature — Human Wizard // Creature — Human Insect")

        assert parts["types"] == "Creature"
        assert parts["subtypes"] == "Human,Wizard,//,Creature"


class TestParsePrice:
    def test_decimal_string(self) -> None:
        assert parse_price("12.50") == 12.5

    def test_absent_is_none_not_zero(self) -> None:
        assert parse_price(None) is None

    def test_unparseable_is_none(self) -> None:
        assert parse_price("n/a") is None
        assert parse_price("") is None

    def test_bare_number(self) -> None:
        assert parse_price(12.5) == 12.5
        assert parse_price(3) == 3.0

    def test_non_finite_and_bool_are_none(self) -> None:
        assert parse_price("nan") is None
        assert parse_price("inf") is None
        assert parse_price(True) is None  # type: ignore[arg-type]


class TestSkipRules:
    def test_missing_oracle_id_skipped(self, make_card) -> None:
        card = make_card("c1", oracle_id=None)

        assert normalize_card(card) is SkipReason.MISSING_ORACLE_ID

    def test_oracle_id_checked_before_layout(self, make_card) -> None:
        card = make_card("c1", oracle_id=None, layout="token")

        assert normalize_card(card) is SkipReason.MISSING_ORACLE_ID

    def test_excluded_layouts_skipped(self, make_card) -> None:
        for layout in ("art_series", "token", "double_faced_token", "emblem"):
            card = make_card("c1", layout=layout)
            assert normalize_card(card) is SkipReason.EXCLUDED_LAYOUT, layout

    def test_playable_layouts_kept(self, make_card) -> None:
        for layout in ("normal", "transform", "modal_dfc", "split", "adventure", "saga"):
            card = make_card("c1", layout=layout)
            assert not isinstance(normalize_card(card), SkipReason), layout

    def test_malformed_record_skipped(self, make_card) -> None:
        card = make_card("c1")
        del card["name"]

        assert normalize_card(card) is SkipReason.MALFORMED

    def test_non_mapping_skipped(self) -> None:
        assert normalize_card("not a card") is SkipReason.MALFORMED  # type: ignore[arg-type]


class TestNormalizeSingleFaced:
    def test_core_fields(self, sample_records: list[dict[str, Any]]) -> None:
        row = normalize_card(_by_name(sample_records, "Lightning Bolt"))
        assert not isinstance(row, SkipReason)

        assert row["id"] == "e3285e6b-3e79-4d7c-bf96-d920f973b80c"
        assert row["oracle_id"] == "4457ed35-7c10-48c8-9776-456485fdf070"
        assert row["mana_cost"] == "{R}"
        assert row["cmc"] == 1.0
        assert row["oracle_text"] == "Lightning Bolt deals 3 damage to any target."
        assert row["types"] == "Instant"
        assert row["set_code"] == "m10"
        assert row["set_name"] == "Magic 2010"
        assert row["collector_number"] == "146"
        assert row["rarity"] == "common"
        assert row["released_at"] == "2009-07-17"
        assert row["multiverse_id"] == 191089
        assert row["mtgo_id"] == 31957

    def test_images(self, sample_records: list[dict[str, Any]]) -> None:
        row = normalize_card(_by_name(sample_records, "Lightning Bolt"))
        assert not isinstance(row, SkipReason)

        assert row["image_uri"] == "https://cards.scryfall.io/normal/front/e/3/e3285e6b.jpg"
        assert row["image_uri_small"] == "https://cards.scryfall.io/small/front/e/3/e3285e6b.jpg"

    def test_prices(self, sample_records: list[dict[str, Any]]) -> None:
        row = normalize_card(_by_name(sample_records, "Lightning Bolt"))
        assert not isinstance(row, SkipReason)

        assert row["price_tcg_player"] == 2.15
        assert row["price_card_market"] == 1.80
        assert row["price_card_hoarder"] == 0.03
        assert row["price_card_kingdom"] is None
        assert row["price_star_city"] is None

    def test_absent_price_is_none(self, make_card) -> None:
        row = normalize_card(make_card("c1", prices={"usd": None, "eur": "1.00"}))
        assert not isinstance(row, SkipReason)

        assert row["price_tcg_player"] is None
        assert row["price_card_market"] == 1.0

    def test_odd_price_values_keep_card(self, make_card) -> None:
        card = make_card("c1", prices={"usd": 12.5, "eur": {"amount": 1}, "tix": "nan"})
        row = normalize_card(card)
        assert not isinstance(row, SkipReason)

        assert row["price_tcg_player"] == 12.5
        assert row["price_card_market"] is None
        assert row["price_card_hoarder"] is None

    def test_missing_prices_object(self, make_card) -> None:
        card = make_card("c1")
        del card["prices"]
        row = normalize_card(card)
        assert not isinstance(row, SkipReason)

        assert row["price_tcg_player"] is None
        assert row["price_card_market"] is None
        assert row["price_card_hoarder"] is None

    def test_colors_joined(self, make_card) -> None:
        row = normalize_card(make_card("c1", colors=["W", "U"], color_identity=["W", "U", "B"]))
        assert not isinstance(row, SkipReason)

        assert row["colors"] == "W,U"
        assert row["color_identity"] == "W,U,B"

    def test_colorless_is_none(self, make_card) -> None:
        row = normalize_card(make_card("c1", colors=[], color_identity=[]))
        assert not isinstance(row, SkipReason)

        assert row["colors"] is None
        assert row["color_identity"] is None

    def test_json_fields(self, sample_records: list[dict[str, Any]]) -> None:
        row = normalize_card(_by_name(sample_records, "Sheoldred, the Apocalypse"))
        assert not isinstance(row, SkipReason)

        assert json.loads(row["legalities"])["standard"] == "legal"
        assert json.loads(row["keywords"]) == ["Deathtouch"]
        assert row["supertypes"] == "Legendary"
        assert row["subtypes"] == "Phyrexian,Praetor"
        assert row["power"] == "4"
        assert row["toughness"] == "5"

    def test_absent_json_fields_are_none(self, make_card) -> None:
        card = make_card("c1")
        del card["legalities"]
        del card["keywords"]
        row = normalize_card(card)
        assert not isinstance(row, SkipReason)

        assert row["legalities"] is None
        assert row["keywords"] is None

    def test_empty_keyword_list_kept(self, make_card) -> None:
        row = normalize_card(make_card("c1", keywords=[]))
        assert not isinstance(row, SkipReason)

        assert row["keywords"] == "[]"

    def test_unknown_fields_ignored(self, make_card) -> None:
        row = normalize_card(make_card("c1", some_future_field={"x": 1}))

        assert not isinstance(row, SkipReason)

    def test_pure(self, make_card) -> None:
        card = make_card("c1")

        assert normalize_card(card) == normalize_card(card)


class TestNormalizeMultiFaced:
    def test_mana_cost_from_first_face(self, sample_records: list[dict[str, Any]]) -> None:
        row = normalize_card(_by_name(sample_records, "Delver of Secrets // Insectile Aberration"))
        assert not isinstance(row, SkipReason)

        assert row["mana_cost"] == "{U}"

    def test_oracle_text_joined_across_faces(self, sample_records: list[dict[str, Any]]) -> None:
        row = normalize_card(_by_name(sample_records, "Delver of Secrets // Insectile Aberration"))
        assert not isinstance(row, SkipReason)

        front, back = row["oracle_text"].split(FACE_TEXT_SEPARATOR)
        assert front.startswith("At the beginning of your upkeep")
        assert back == "Flying"

    def test_images_from_first_face(self, sample_records: list[dict[str, Any]]) -> None:
        row = normalize_card(_by_name(sample_records, "Delver of Secrets // Insectile Aberration"))
        assert not isinstance(row, SkipReason)

        assert row["image_uri"] == "https://cards.scryfall.io/normal/front/b/6/b6f3a4c8.jpg"
        assert row["image_uri_small"] == "https://cards.scryfall.io/small/front/b/6/b6f3a4c8.jpg"

    def test_top_level_values_win(self, make_card) -> None:
        """Split cards carry top-level images; faces only fill gaps."""
        card = make_card(
            "c1",
            layout="split",
            mana_cost="{1}{R} // {2}{U}",
            oracle_text="Top-level text",
            card_faces=[
                {"name": "A", "mana_cost": "{1}{R}", "oracle_text": "A text"},
                {"name": "B", "mana_cost": "{2}{U}", "oracle_text": "B text"},
            ],
        )
        row = normalize_card(card)
        assert not isinstance(row, SkipReason)

        assert row["mana_cost"] == "{1}{R} // {2}{U}"
        assert row["oracle_text"] == "Top-level text"
        assert row["image_uri"] == "https://cards.scryfall.io/normal/c1.jpg"

    def test_one_row_per_multi_faced_card(self, sample_records: list[dict[str, Any]]) -> None:
        rows = list(normalize_cards(sample_records))
        delver_rows = [r for r in rows if r["name"].startswith("Delver of Secrets")]

        assert len(delver_rows) == 1


class TestNormalizeCards:
    def test_counts_skips(self, sample_records: list[dict[str, Any]]) -> None:
        stats = NormalizeStats()
        rows = list(normalize_cards(sample_records, stats))

        assert len(rows) == 3
        assert stats.seen == 6
        assert stats.normalized == 3
        assert stats.skipped[SkipReason.MISSING_ORACLE_ID] == 1
        assert stats.skipped[SkipReason.EXCLUDED_LAYOUT] == 2
        assert stats.skipped_total == 3

    def test_skipped_records_never_emitted(self, sample_records: list[dict[str, Any]]) -> None:
        names = {row["name"] for row in normalize_cards(sample_records)}

        assert "Goblin" not in names
        assert "Emblem — Chandra, Torch of Defiance" not in names
        assert "Sheoldred, the Apocalypse // Sheoldred, the Apocalypse" not in names
