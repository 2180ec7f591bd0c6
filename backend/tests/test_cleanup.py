from forumlite.modules.composer.cleanup import cleanup_markdown, collapse_blank_lines


def test_blank_line_runs_collapse_to_one():
    assert cleanup_markdown("a\n\n\n\nb") == "a\n\nb"
    assert cleanup_markdown("a\n \n\t\n\nb") == "a\n\nb"


def test_single_blank_line_kept():
    assert cleanup_markdown("a\n\nb\nc") == "a\n\nb\nc"


def test_result_is_trimmed():
    assert cleanup_markdown("\n\n  text  \n\n") == "text"
    assert cleanup_markdown("") == ""
    assert cleanup_markdown("\n \n") == ""


def test_empty_markers_removed():
    assert cleanup_markdown("x ** ** y") == "x  y"
    assert cleanup_markdown("~~~~ tail") == "tail"
    assert cleanup_markdown("a `` b") == "a  b"


def test_adjacent_bold_runs_are_not_empty_markers():
    assert cleanup_markdown("**a** **b**") == "**a** **b**"
    assert cleanup_markdown("~~a~~ ~~b~~") == "~~a~~ ~~b~~"


def test_empty_tags_removed_until_stable():
    assert cleanup_markdown('<span style="color: red;"></span>x') == "x"
    assert cleanup_markdown("a<u><span> </span></u>b") == "ab"
    assert cleanup_markdown('<div style="text-align: center;">\n\n</div>') == ""


def test_non_empty_tags_kept():
    text = '<span style="color: red;">x</span> <u>y</u>'
    assert cleanup_markdown(text) == text


def test_fenced_code_untouched():
    text = "before\n\n```\nline\n\n\n\n<span></span> ** **\n```\n\nafter"
    assert cleanup_markdown(text) == text


def test_text_around_fence_still_cleaned():
    text = "a\n\n\n\n```js\nx\n```\n\n\n\nb <u></u>"
    assert cleanup_markdown(text) == "a\n\n```js\nx\n```\n\nb"


def test_cleanup_is_idempotent():
    text = "# T\n\n\n\n* a\n  * b\n\n<span style=\"color: red;\"> </span>\n\n```\n\n\n```\n\n| a |\n| --- |"
    once = cleanup_markdown(text)
    assert cleanup_markdown(once) == once


def test_indented_fence_untouched():
    markdown = "* x\n\n  ```\n  a\n\n\n\n  b\n  ```"
    assert cleanup_markdown(markdown) == markdown


def test_quoted_fence_untouched():
    markdown = "> ```\n> a\n>\n>\n>\n> b\n> ```"
    assert cleanup_markdown(markdown) == markdown


def test_collapse_blank_lines_skips_fences():
    assert collapse_blank_lines("a\n\n\n\n```\nx\n\n\n\ny\n```") == "a\n\n```\nx\n\n\n\ny\n```"
