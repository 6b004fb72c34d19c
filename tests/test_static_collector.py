from collectors.static import collect_resources, resolve_origin


PAGE_URL = "https://example.com/blog/post"


def test_resolve_origin_relative_and_ports():
    assert resolve_origin("/app.js", PAGE_URL) == "https://example.com"
    assert resolve_origin("//cdn.example.net/x.js", PAGE_URL) == "https://cdn.example.net"
    assert resolve_origin("https://CDN.Example.com:443/a.js") == "https://cdn.example.com"
    assert resolve_origin("http://api.example.com:8080/v1") == "http://api.example.com:8080"


def test_resolve_origin_rejects_malformed_and_non_network():
    assert resolve_origin("http://bad:port/x", PAGE_URL) is None
    assert resolve_origin("javascript:void(0)", PAGE_URL) is None
    assert resolve_origin("mailto:someone@example.com", PAGE_URL) is None
    assert resolve_origin("", PAGE_URL) is None


def test_collects_scripts_styles_images_and_hints():
    html = """
    <html>
      <head>
        <script src="https://cdn.example.com/lib.js"></script>
        <script src="https://cdn.example.com/other.js"></script>
        <script>console.log(1)</script>
        <script>   </script>
        <link rel="stylesheet" href="https://fonts.googleapis.com/css?family=Roboto">
        <link rel="preconnect" href="https://api.example.org">
        <link rel="dns-prefetch" href="//metrics.example.net">
        <link rel="icon" href="https://icons.example.com/favicon.ico">
        <style>body{color:red}</style>
      </head>
      <body>
        <img src="https://img.example.com/a.png">
        <img src="data:image/png;base64,iVBORw0KGgo=">
      </body>
    </html>
    """
    manifest = collect_resources(html, PAGE_URL)

    assert manifest.inline_scripts == ["console.log(1)"]
    assert manifest.inline_styles == ["body{color:red}"]
    assert manifest.external_script_origins.as_list() == ["https://cdn.example.com"]
    assert manifest.external_style_origins.as_list() == ["https://fonts.googleapis.com"]
    assert manifest.connect_origins.as_list() == ["https://api.example.org", "https://metrics.example.net"]
    assert manifest.image_origins.as_list() == ["https://img.example.com"]
    assert manifest.data_uri_counts.images == 1
    assert "https://icons.example.com" not in manifest.image_origins


def test_inline_code_kept_verbatim_and_duplicates_preserved():
    html = "<script>\n  var a = 1;\n</script><script>\n  var a = 1;\n</script>"
    manifest = collect_resources(html, PAGE_URL)
    assert manifest.inline_scripts == ["\n  var a = 1;\n", "\n  var a = 1;\n"]


def test_data_uri_script_counted_not_recorded():
    html = '<script src="data:text/javascript,alert(1)"></script>'
    manifest = collect_resources(html, PAGE_URL)
    assert manifest.data_uri_counts.scripts == 1
    assert len(manifest.external_script_origins) == 0
    assert manifest.inline_scripts == []


def test_inline_style_urls_become_font_origins():
    html = """
    <style>
      @font-face { font-family: X; src: url('https://fonts.gstatic.com/x.woff2') format('woff2'); }
      .logo { background: url("data:image/svg+xml;base64,AAAA"); }
      .hero { background: url(/img/hero.jpg); }
    </style>
    """
    manifest = collect_resources(html, PAGE_URL)
    assert manifest.font_origins.as_list() == ["https://fonts.gstatic.com", "https://example.com"]
    assert manifest.data_uri_counts.styles == 1


def test_relative_resources_resolve_against_page_url():
    html = '<script src="/static/app.js"></script><img src="pic.png">'
    manifest = collect_resources(html, PAGE_URL)
    assert manifest.external_script_origins.as_list() == ["https://example.com"]
    assert manifest.image_origins.as_list() == ["https://example.com"]


def test_malformed_urls_are_skipped_silently():
    html = '<script src="http://bad:port/x.js"></script><img src="http://[::1">'
    manifest = collect_resources(html, PAGE_URL)
    assert len(manifest.external_script_origins) == 0
    assert len(manifest.image_origins) == 0


def test_broken_or_empty_html_never_fails():
    assert collect_resources("", PAGE_URL).origin_count() == 0
    manifest = collect_resources("<div><script src='https://a.example.com/x.js'><img src=", PAGE_URL)
    assert isinstance(manifest.inline_scripts, list)
    assert collect_resources("not html at all <<<>>>", PAGE_URL).inline_scripts == []


def test_crlf_line_endings_normalized_before_hashing():
    from core.policy_builder import hash_source

    html = "<script>\r\nvar a = 1;\r\n</script><style>\rp{}\r</style>"
    manifest = collect_resources(html, PAGE_URL)

    assert manifest.inline_scripts == ["\nvar a = 1;\n"]
    assert manifest.inline_styles == ["\np{}\n"]
    assert hash_source(manifest.inline_scripts[0]) == "'sha256-UXNer4npOCf/F4eCtHkKG99a5wMJMyYh4BeQWH3QeYQ='"
