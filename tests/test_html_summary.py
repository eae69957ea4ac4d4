from llms_meta_scraper.html_summary import PageRecord, _MetaParser, extract_meta, fetch_page_record


def test_meta_parser():
    parser = _MetaParser()
    html = "<html><head><title>Test</title></head><body></body></html>"
    parser.feed(html)
    assert parser.title == "Test"


def test_title_and_description_from_standard_tags():
    html = """
    <html><head>
      <title>  Pricing | Example  </title>
      <meta name="description" content=" Plans for every team. ">
      <meta property="og:title" content="OG Pricing">
      <meta property="og:description" content="OG plans">
    </head></html>
    """
    record = extract_meta(html, "https://example.com/pricing")
    assert record == PageRecord(
        url="https://example.com/pricing",
        title="Pricing | Example",
        description="Plans for every team.",
    )


def test_open_graph_fallbacks():
    html = """
    <head>
      <meta property="og:title" content=" OG Title ">
      <meta property="og:description" content="OG description" />
    </head>
    """
    record = extract_meta(html, "https://example.com/")
    assert record.title == "OG Title"
    assert record.description == "OG description"


def test_empty_title_and_description_fall_back_to_open_graph():
    html = """
    <title>   </title>
    <meta name="description" content="">
    <meta property="og:title" content="Fallback">
    <meta property="og:description" content="From OG">
    """
    record = extract_meta(html, "https://example.com/")
    assert record.title == "Fallback"
    assert record.description == "From OG"


def test_first_title_wins():
    html = "<title>First</title><title>Second</title>"
    assert extract_meta(html, "https://example.com/").title == "First"


def test_script_text_not_part_of_title():
    html = "<head><script>var t = '<title>x</title>';</script><title>Real</title></head>"
    assert extract_meta(html, "https://example.com/").title == "Real"


def test_missing_everything_yields_empty_strings():
    record = extract_meta("<html><body><p>Hello</p></body></html>", "https://example.com/x")
    assert record.title == ""
    assert record.description == ""
    assert not record.is_complete


def test_malformed_html_does_not_raise():
    html = "<html><head><title>Broken<meta name=description content='Still here'"
    record = extract_meta(html, "https://example.com/")
    assert isinstance(record, PageRecord)


def test_entities_are_decoded():
    html = '<title>Tom &amp; Jerry</title><meta name="description" content="Cats &amp; mice">'
    record = extract_meta(html, "https://example.com/")
    assert record.title == "Tom & Jerry"
    assert record.description == "Cats & mice"


def test_failed_fetch_gives_empty_record(gateway_factory):
    gw = gateway_factory({})
    record = fetch_page_record("https://example.com/gone", gw)
    assert record == PageRecord(url="https://example.com/gone", title="", description="")


def test_fetch_page_record_extracts(gateway_factory):
    gw = gateway_factory(
        {"https://example.com/": '<title>Home</title><meta name="description" content="Welcome">'}
    )
    record = fetch_page_record("https://example.com/", gw)
    assert record.is_complete
    assert (record.title, record.description) == ("Home", "Welcome")
