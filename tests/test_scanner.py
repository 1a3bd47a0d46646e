# tests/test_scanner.py
from pathlib import Path

from solflat.core.scanner import mask_source, scan_source, strip_spans
from solflat.models import DirectiveKind

HEADER = "// SPDX-License-Identifier: MIT\npragma solidity ^0.8.0;\n"


def test_import_forms():
    content = (
        HEADER
        + 'import "./A.sol";\n'
        + "import './B.sol' as B;\n"
        + 'import * as C from "@lib/C.sol";\n'
        + 'import {D, E as F} from "../D.sol";\n'
        + "\ncontract X {}\n"
    )
    source = scan_source(Path("/p/X.sol"), content)

    assert [i.specifier for i in source.imports] == ["./A.sol", "./B.sol", "@lib/C.sol", "../D.sol"]
    assert source.body == "contract X {}"


def test_import_ranges_point_at_statement():
    content = 'pragma solidity 0.8.19;\nimport "./A.sol";\n'
    source = scan_source(Path("/p/X.sol"), content)

    statement = source.imports[0]
    assert content[statement.start:statement.end] == 'import "./A.sol";'


def test_multiline_import_removed():
    content = (
        "import {\n"
        "    A,\n"
        "    B\n"
        '} from "./AB.sol";\n'
        "contract X is A, B {}\n"
    )
    source = scan_source(Path("/p/X.sol"), content)

    assert [i.specifier for i in source.imports] == ["./AB.sol"]
    assert source.body == "contract X is A, B {}"


def test_commented_imports_are_ignored():
    content = (
        '// import "./Nope.sol";\n'
        '/* import "./Nope2.sol";\n'
        "   pragma solidity 0.4.0; */\n"
        "contract X {}\n"
    )
    source = scan_source(Path("/p/X.sol"), content)

    assert source.imports == ()
    assert source.directives == ()
    # Comments stay in the body untouched
    assert '// import "./Nope.sol";' in source.body


def test_keywords_inside_strings_are_ignored():
    content = 'contract X {\n    string s = "import \\"./A.sol\\"; pragma x;";\n}\n'
    source = scan_source(Path("/p/X.sol"), content)

    assert source.imports == ()
    assert source.directives == ()


def test_directives_extracted_in_order():
    content = (
        "// SPDX-License-Identifier:   GPL-3.0   \n"
        "pragma solidity >=0.8.0 <0.9.0;\n"
        "pragma abicoder v2;\n"
        "contract X {}\n"
    )
    source = scan_source(Path("/p/X.sol"), content)

    kinds = [d.kind for d in source.directives]
    texts = [d.text for d in source.directives]
    assert kinds == [DirectiveKind.LICENSE, DirectiveKind.PRAGMA, DirectiveKind.PRAGMA]
    assert texts == [
        "// SPDX-License-Identifier:   GPL-3.0",
        "pragma solidity >=0.8.0 <0.9.0;",
        "pragma abicoder v2;",
    ]
    assert source.body == "contract X {}"


def test_license_inside_string_is_not_a_directive():
    content = 'string constant s = "// SPDX-License-Identifier: MIT";\n'
    source = scan_source(Path("/p/X.sol"), content)

    assert source.directives == ()


def test_blank_runs_collapsed():
    content = HEADER + '\n\nimport "./A.sol";\n\n\n\ncontract X {}\n\n\n\ncontract Y {}\n'
    source = scan_source(Path("/p/X.sol"), content)

    assert source.body == "contract X {}\n\ncontract Y {}"


def test_strip_spans_keeps_rest_of_line():
    text = 'pragma solidity ^0.8.0; contract X {}\nline\n'
    stripped = strip_spans(text, [(0, len("pragma solidity ^0.8.0;"))])

    assert stripped == " contract X {}\nline\n"


def test_mask_preserves_offsets():
    text = 'a // c\n/* b\n */ "s//t" x'
    masked, starts = mask_source(text)

    assert len(masked) == len(text)
    assert masked.count("\n") == text.count("\n")
    assert starts == {2}
    assert masked.endswith('"    " x')


def test_import_without_quoted_path_is_still_recorded():
    content = "import Foo;\ncontract X {}\n"
    source = scan_source(Path("/p/X.sol"), content)

    assert len(source.imports) == 1
    assert source.imports[0].specifier == ""
    assert source.body == "contract X {}"
