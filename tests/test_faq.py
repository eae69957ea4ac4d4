"""
FAQ extraction tests: microdata, JSON-LD and heading heuristic tiers
"""
import json

import pytest

from llms_meta_scraper.faq import (
    FaqItem,
    extract_faq_items,
    extract_faqs_from_ld_json,
    fetch_faq_items,
    looks_like_question,
)

MICRODATA_FAQ = """
<div itemscope itemtype="https://schema.org/FAQPage">
  <div itemscope itemprop="mainEntity" itemtype="https://schema.org/Question">
    <h3 itemprop="name">What is Example?</h3>
    <div itemscope itemprop="acceptedAnswer" itemtype="https://schema.org/Answer">
      <div itemprop="text"> Example is a demo product. </div>
    </div>
  </div>
  <div itemscope itemprop="mainEntity" itemtype="https://schema.org/Question">
    <h3 itemprop="name">Is there a free plan?</h3>
    <div itemscope itemprop="acceptedAnswer" itemtype="https://schema.org/Answer">
      <div itemprop="text"></div>
    </div>
  </div>
</div>
"""

HEADING_FAQ = """
<h2>How do I get started?</h2>
<p>Sign up on the home page.</p>
"""


def _ld_script(data) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


def _question(name, answer, key="acceptedAnswer"):
    return {"@type": "Question", "name": name, key: {"@type": "Answer", "text": answer}}


class TestLooksLikeQuestion:
    @pytest.mark.parametrize(
        "text",
        ["Pricing?", "what is this", "How it works", "  Can I cancel ", "SHOULD I upgrade"],
    )
    def test_questions(self, text):
        assert looks_like_question(text)

    @pytest.mark.parametrize("text", ["", "Pricing", "Whatever works", "Howto", "Do"])
    def test_not_questions(self, text):
        assert not looks_like_question(text)


class TestMicrodata:
    def test_extracts_complete_pairs_only(self):
        items = extract_faq_items(MICRODATA_FAQ)
        assert items == [FaqItem("What is Example?", "Example is a demo product.")]

    def test_microdata_wins_over_headings(self):
        items = extract_faq_items(MICRODATA_FAQ + HEADING_FAQ)
        assert [i.question for i in items] == ["What is Example?"]

    def test_main_entity_of_page_used_when_main_entity_absent(self):
        html = """
        <section itemscope itemtype="https://schema.org/FAQPage">
          <div itemprop="mainEntityOfPage" itemscope itemtype="https://schema.org/Question">
            <span itemprop="name">Who are you?</span>
            <span itemprop="text">A small team.</span>
          </div>
        </section>
        """
        assert extract_faq_items(html) == [FaqItem("Who are you?", "A small team.")]

    def test_main_entity_of_page_ignored_when_main_entity_present(self):
        html = """
        <section itemscope itemtype="https://schema.org/FAQPage">
          <div itemprop="mainEntity">
            <span itemprop="name">Q1</span><span itemprop="text">A1</span>
          </div>
          <div itemprop="mainEntityOfPage">
            <span itemprop="name">Q2</span><span itemprop="text">A2</span>
          </div>
        </section>
        """
        assert extract_faq_items(html) == [FaqItem("Q1", "A1")]

    def test_http_itemtype_accepted(self):
        html = MICRODATA_FAQ.replace("https://schema.org/FAQPage", "http://schema.org/FAQPage")
        assert len(extract_faq_items(html)) == 1


class TestJsonLd:
    def test_array_of_two_faq_pages_is_unioned_and_deduped(self):
        data = [
            {
                "@context": "https://schema.org",
                "@type": "FAQPage",
                "mainEntity": [_question("Q1", "A1")],
            },
            {
                "@type": "FAQPage",
                "mainEntity": [_question("Q1", "A1"), _question("Q2", "A2")],
            },
        ]
        items = extract_faq_items(_ld_script(data))
        assert items == [FaqItem("Q1", "A1"), FaqItem("Q2", "A2")]

    def test_single_main_entity_object_and_type_list(self):
        data = {"@type": ["WebPage", "FAQPage"], "mainEntity": _question("Q", "A")}
        assert extract_faq_items(_ld_script(data)) == [FaqItem("Q", "A")]

    def test_nested_question_inside_graph(self):
        data = {
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "Organization", "name": "Example"},
                {"@type": "WebPage", "hasPart": {"section": [_question("Deep?", "Yes.")]}},
            ],
        }
        assert extract_faq_items(_ld_script(data)) == [FaqItem("Deep?", "Yes.")]

    def test_answer_variants(self):
        data = {
            "@type": "FAQPage",
            "mainEntity": [
                {
                    "@type": "Question",
                    "headline": "Headline question",
                    "suggestedAnswer": [
                        {"@type": "Answer", "description": "First answer"},
                        {"@type": "Answer", "text": "Second answer"},
                        "not an object",
                    ],
                },
                _question("Plural", "Answers key", key="acceptedAnswers"),
                {"@type": "Question", "name": "No answer"},
            ],
        }
        assert extract_faqs_from_ld_json(data)[:3] == [
            FaqItem("Headline question", "First answer"),
            FaqItem("Headline question", "Second answer"),
            FaqItem("Plural", "Answers key"),
        ]

    def test_accepted_answer_preferred_over_suggested(self):
        q = {
            "@type": "Question",
            "name": "Q",
            "acceptedAnswer": {"text": "accepted"},
            "suggestedAnswer": {"text": "suggested"},
        }
        assert extract_faqs_from_ld_json(q) == [FaqItem("Q", "accepted")]

    def test_type_match_is_case_insensitive_substring(self):
        data = {"type": "schema:faqpage", "mainEntity": {"type": "QUESTION", "name": "Q", "acceptedAnswer": {"text": "A"}}}
        items = extract_faqs_from_ld_json(data)
        assert set(items) == {FaqItem("Q", "A")}

    def test_invalid_json_blocks_are_skipped(self):
        html = (
            '<script type="application/ld+json">{not json</script>'
            + _ld_script({"@type": "FAQPage", "mainEntity": [_question("Q", "A")]})
        )
        assert extract_faq_items(html) == [FaqItem("Q", "A")]

    def test_json_ld_wins_over_headings(self):
        html = _ld_script({"@type": "Question", "name": "Q", "acceptedAnswer": {"text": "A"}}) + HEADING_FAQ
        assert extract_faq_items(html) == [FaqItem("Q", "A")]

    def test_pathologically_nested_block_falls_through_to_headings(self):
        depth = 100000
        html = (
            '<script type="application/ld+json">'
            + "[" * depth
            + "]" * depth
            + "</script><h2>What?</h2><p>A</p>"
        )
        assert extract_faq_items(html) == [FaqItem("What?", "A")]

    def test_deeply_nested_question_is_found(self):
        node = _question("Deep?", "Yes.")
        for _ in range(5000):
            node = {"@type": "WebPage", "hasPart": [node]}
        assert extract_faqs_from_ld_json(node) == [FaqItem("Deep?", "Yes.")]

    def test_other_schema_types_yield_nothing(self):
        html = _ld_script({"@type": "Organization", "name": "Example"})
        assert extract_faq_items(html) == []


class TestHeadings:
    def test_answers_collected_until_next_heading(self):
        html = """
        <body>
        <h1>FAQ</h1>
        <h2>How do refunds work?</h2>
        Intro text
        <p>Refunds take 5 days.</p>
        <!-- internal note -->
        <ul><li>Not collected</li></ul>
        <div>Contact support.</div>
        <h3>Pricing</h3>
        <p>Ignored</p>
        <h3>Can I cancel anytime?</h3>
        <p>Yes.</p>
        </body>
        """
        items = extract_faq_items(html)
        assert items == [
            FaqItem(
                "How do refunds work?",
                "Intro text\n\nRefunds take 5 days.\n\nContact support.",
            ),
            FaqItem("Can I cancel anytime?", "Yes."),
        ]

    def test_question_without_answer_is_dropped(self):
        html = "<h2>Why?</h2><h2>What now?</h2><p>This.</p>"
        assert extract_faq_items(html) == [FaqItem("What now?", "This.")]

    def test_h1_stops_answer(self):
        html = "<div><h4>Does it scale?</h4><p>Yes.</p><h1>Next</h1><p>No.</p></div>"
        assert extract_faq_items(html) == [FaqItem("Does it scale?", "Yes.")]

    def test_no_faq_found(self):
        assert extract_faq_items("<h2>About us</h2><p>We build things.</p>") == []


def test_fetch_faq_items(gateway_factory):
    gw = gateway_factory({"https://example.com/faq": HEADING_FAQ})
    assert fetch_faq_items("https://example.com/faq", gw) == [
        FaqItem("How do I get started?", "Sign up on the home page.")
    ]
    assert fetch_faq_items("https://example.com/missing", gw) is None
