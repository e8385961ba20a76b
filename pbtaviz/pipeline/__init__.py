"""Analysis pipeline entrypoints."""


def run_chromothripsis(*args, **kwargs):
    from pbtaviz.pipeline.chromothripsis import run_chromothripsis as _run_chromothripsis

    return _run_chromothripsis(*args, **kwargs)


def run_signatures(*args, **kwargs):
    from pbtaviz.pipeline.signatures import run_signatures as _run_signatures

    return _run_signatures(*args, **kwargs)


__all__ = ["run_chromothripsis", "run_signatures"]
