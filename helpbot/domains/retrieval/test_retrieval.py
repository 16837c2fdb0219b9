"""
Tests for term extraction, scoring, knowledge search, and the relevance gate.
"""

from __future__ import annotations

import pytest

from helpbot.config.errors import StorageError

from .gate import EmptyTermsPolicy, RelevanceGate
from .knowledge_search import KnowledgeSearch, highlight_snippet
from .models import Document, QueryTerms, SearchResult
from .scorer import DocumentScorer, make_snippet
from .terms import TermExtractor, extract_terms


class FakeStore:
    """In-memory document source."""

    def __init__(self, documents: list[Document]) -> None:
        self.documents = documents

    async def all_documents(self) -> list[Document]:
        return list(self.documents)

    async def get_body(self, identifier: str) -> str | None:
        for doc in self.documents:
            if doc.identifier == identifier:
                return doc.body
        return None


class BrokenStore:
    """Document source whose directory cannot be read."""

    async def all_documents(self) -> list[Document]:
        raise StorageError("knowledge base missing")

    async def get_body(self, identifier: str) -> str | None:
        return None


def make_doc(identifier: str, title: str, body: str) -> Document:
    return Document(
        identifier=identifier,
        title=title,
        url=f"https://help.example.com/{identifier}",
        body=body,
    )


@pytest.fixture
def password_doc() -> Document:
    return make_doc(
        "password.html",
        "Password Reset Policy",
        "To reset your password, open the account portal. You must reset your "
        "password within 24 hours of receiving the reset link.",
    )


@pytest.fixture
def vpn_doc() -> Document:
    return make_doc(
        "vpn.html",
        "Remote Access",
        "Connect to the VPN using the corporate client before opening the intranet.",
    )


# --- Term extraction ---


def test_extract_removes_stopwords_and_short_words() -> None:
    """Test stopwords and words of two characters or fewer are dropped."""
    terms = extract_terms("how do I reset my password")
    assert terms.terms == ("how", "reset", "password")
    assert terms.technical_terms == ()


def test_extract_strips_punctuation() -> None:
    """Test punctuation is removed before splitting."""
    terms = extract_terms("Printer jammed?! Tell me, please.")
    assert "jammed" in terms.terms
    assert "please" in terms.terms
    assert "tell" not in terms.terms
    assert all(t.isalnum() for t in TermExtractor().plain_terms("jammed?! please."))


def test_extract_empty_query() -> None:
    """Test empty and whitespace-only queries yield no terms."""
    assert extract_terms("").is_empty
    assert extract_terms("   ").is_empty
    assert extract_terms("is it a an").is_empty


def test_extract_acronym_is_technical() -> None:
    """Test acronyms are technical terms even at the start of the query."""
    terms = extract_terms("VPN setup")
    assert terms.technical_terms == ("vpn",)
    assert terms.terms == ("vpn", "setup")


def test_extract_hyphenated_terms() -> None:
    """Test hyphenated tokens are kept whole alongside the stripped word."""
    terms = extract_terms("Upgrade to Windows-10 over wi-fi")
    assert terms.technical_terms == ("windows-10", "wi-fi")
    assert "windows10" in terms.terms
    assert "wi-fi" in terms.terms


def test_extract_sentence_initial_word_not_technical() -> None:
    """Test an ordinary capitalized first word is not promoted."""
    assert extract_terms("Outlook crashes on start").technical_terms == ()
    assert extract_terms("Why does Outlook crash").technical_terms == ("outlook",)


def test_extract_two_letter_acronym_dropped() -> None:
    """Test acronyms shorter than three characters are not terms."""
    terms = extract_terms("Contact IT support")
    assert terms.terms == ("contact", "support")
    assert terms.technical_terms == ()
    assert all(len(t) > 2 for t in terms.terms)


def test_extract_phrase_requires_two_terms() -> None:
    """Test the exact phrase is only built from two or more plain terms."""
    assert extract_terms("password").phrase is None
    assert extract_terms("reset the password").phrase == "reset password"


def test_extract_custom_stopwords() -> None:
    """Test the stopword list is a tunable."""
    extractor = TermExtractor(stopwords={"how", "the"})
    assert extractor.extract("how to reset the password").terms == ("reset", "password")


# --- Scoring ---


def test_score_excludes_documents_without_matches(vpn_doc: Document) -> None:
    """Test documents without any term in the body are excluded."""
    assert DocumentScorer().score(vpn_doc, extract_terms("printer toner")) is None


def test_score_title_bonus(password_doc: Document) -> None:
    """Test title matches add to body coverage."""
    result = DocumentScorer().score(password_doc, extract_terms("how do I reset my password"))
    assert result is not None
    assert result.matched_terms == ["reset", "password"]
    assert result.title_match_count == 2
    assert result.relevance > 2 / 3


def test_score_technical_term_needs_whole_word() -> None:
    """Test a technical term inside a longer word earns no bonus."""
    doc = make_doc("menu.html", "Cafeteria Menu", "Lunch is served with vpnx bread and soup.")
    result = DocumentScorer().score(doc, extract_terms("Lunch VPN"))
    assert result is not None
    assert result.matched_terms == ["lunch"]
    assert result.technical_match_count == 0
    assert result.relevance == pytest.approx(0.5)


def test_score_is_capped(vpn_doc: Document) -> None:
    """Test bonuses never push relevance above 1.0."""
    result = DocumentScorer().score(vpn_doc, extract_terms("VPN setup"))
    assert result is not None
    assert result.technical_match_count == 1
    assert result.relevance == 1.0


def test_score_exact_phrase(password_doc: Document) -> None:
    """Test the exact phrase flag."""
    doc = password_doc.model_copy(update={"body": "Use the account portal to reset password quickly."})
    result = DocumentScorer().score(doc, extract_terms("reset password"))
    assert result is not None
    assert result.exact_phrase is True


def test_make_snippet_ellipsis() -> None:
    """Test snippets are clipped to the radius and marked on both sides."""
    text = "a" * 500 + " password " + "b" * 500
    snippet = make_snippet(text, text.index("password"), len("password"))
    assert snippet.startswith("...")
    assert snippet.endswith("...")
    assert "password" in snippet
    assert len(snippet) == 200 + len("password") + 200 + 6


def test_make_snippet_short_text() -> None:
    """Test a short body is returned without ellipses."""
    assert make_snippet("reset password", 0, 5) == "reset password"


# --- Knowledge search ---


async def test_search_empty_terms_returns_nothing(password_doc: Document) -> None:
    """Test trivial queries never match."""
    search = KnowledgeSearch(FakeStore([password_doc]))
    outcome = await search.search("is it")
    assert outcome.results == []


async def test_search_ranks_by_relevance(password_doc: Document, vpn_doc: Document) -> None:
    """Test results are sorted by descending relevance."""
    weak = make_doc("misc.html", "Misc", "Passwords are personal.")
    search = KnowledgeSearch(FakeStore([weak, vpn_doc, password_doc]))

    outcome = await search.search("how do I reset my password")

    assert [r.identifier for r in outcome.results] == ["password.html", "misc.html"]
    assert all(0.0 <= r.relevance <= 1.0 for r in outcome.results)


async def test_search_ties_keep_store_order() -> None:
    """Test equal scores keep the store's iteration order."""
    docs = [make_doc(f"{i}.html", "Note", "printer settings") for i in range(3)]
    outcome = await KnowledgeSearch(FakeStore(docs)).search("printer")
    assert [r.identifier for r in outcome.results] == ["0.html", "1.html", "2.html"]


async def test_search_is_idempotent(password_doc: Document, vpn_doc: Document) -> None:
    """Test repeated searches give identical output."""
    search = KnowledgeSearch(FakeStore([password_doc, vpn_doc]))
    first = await search.search("reset password over VPN")
    second = await search.search("reset password over VPN")
    assert first.results == second.results


async def test_search_unavailable_store_returns_nothing() -> None:
    """Test a missing store is not an error."""
    outcome = await KnowledgeSearch(BrokenStore()).search("reset password")
    assert outcome.results == []


def test_highlight_snippet() -> None:
    """Test matched terms are wrapped in strong tags."""
    assert highlight_snippet("Reset your Password", ["password", "reset"]) == (
        "<strong>Reset</strong> your <strong>Password</strong>"
    )
    assert highlight_snippet("unchanged", []) == "unchanged"


# --- Relevance gate ---


def _result(title: str, snippet: str, relevance: float) -> SearchResult:
    return SearchResult(
        identifier=f"{title}.html",
        title=title,
        url="https://help.example.com",
        snippet=snippet,
        relevance=relevance,
    )


def test_gate_rejects_no_results() -> None:
    """Test an empty result set is rejected."""
    decision = RelevanceGate().evaluate([], extract_terms("reset password"))
    assert decision.accepted is False
    assert decision.reason == "no_results"


def test_gate_empty_terms_strict() -> None:
    """Test the strict policy needs a very strong top result."""
    gate = RelevanceGate()
    assert gate.evaluate([_result("A", "x", 0.9)], QueryTerms()).accepted is True
    assert gate.evaluate([_result("A", "x", 0.5)], QueryTerms()).accepted is False


def test_gate_empty_terms_permissive() -> None:
    """Test the permissive policy accepts any result."""
    gate = RelevanceGate(empty_terms_policy=EmptyTermsPolicy.PERMISSIVE)
    assert gate.evaluate([_result("A", "x", 0.1)], QueryTerms()).accepted is True


def test_gate_unrelated_page_for_acronym_query() -> None:
    """Test an acronym query does not accept a page that only contains its letters."""
    doc = make_doc("menu.html", "Cafeteria Menu", "Lunch is served with fresh bread in the item line.")
    results = [r for r in [DocumentScorer().score(doc, extract_terms("Contact IT support"))] if r]
    assert results == []
    decision = RelevanceGate().evaluate(
        [_result("Cafeteria Menu", "Lunch is served with vpnx bread.", 0.3)],
        extract_terms("VPN keeps dropping tonight"),
    )
    assert decision.accepted is False


def test_gate_technical_term() -> None:
    """Test a technical term in the top results accepts."""
    results = [_result("Remote Access", "Connect to the VPN first.", 0.3)]
    decision = RelevanceGate().evaluate(results, extract_terms("VPN keeps dropping tonight"))
    assert decision.reason == "technical_term"


def test_gate_term_coverage(password_doc: Document) -> None:
    """Test the password reset scenario is accepted by term overlap."""
    terms = extract_terms("how do I reset my password")
    result = DocumentScorer().score(password_doc, terms)
    assert result is not None

    decision = RelevanceGate().evaluate([result], terms)

    assert decision.accepted is True
    assert decision.reason == "term_coverage"


def test_gate_high_relevance() -> None:
    """Test a strong top result accepts without other signals."""
    results = [_result("Unrelated", "nothing here", 0.75)]
    decision = RelevanceGate().evaluate(results, extract_terms("printer toner replacement"))
    assert decision.reason == "high_relevance"


def test_gate_adding_phrase_match_only_helps() -> None:
    """Test an added exact-phrase match moves a rejection to acceptance."""
    terms = extract_terms("printer toner replacement schedule")
    weak = [_result("Office Supplies", "Order toner from the portal.", 0.25)]
    assert RelevanceGate().evaluate(weak, terms).accepted is False

    stronger = [
        _result(
            "Office Supplies",
            "Order toner from the portal. See the printer toner replacement schedule.",
            0.25,
        )
    ]
    decision = RelevanceGate().evaluate(stronger, terms)
    assert decision.accepted is True
    assert decision.reason == "exact_phrase"
