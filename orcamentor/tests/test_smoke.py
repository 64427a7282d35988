"""Public smoke tests for basic module wiring.

Keep these minimal and free of any real-world data.
"""

from __future__ import annotations


def test_imports() -> None:
    import orcamentor
    import orcamentor.application
    import orcamentor.cli.main
    import orcamentor.domain
    import orcamentor.rendering
    import orcamentor.runtime
    import orcamentor.runtime.server

    assert orcamentor is not None
    assert orcamentor.application is not None
    assert orcamentor.cli.main is not None
    assert orcamentor.domain is not None
    assert orcamentor.rendering is not None
    assert orcamentor.runtime is not None
    assert orcamentor.runtime.server is not None
