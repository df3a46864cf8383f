"""
Pipeline steps.

Components:
- cleanup.py: remove output / temp directories
- grammar.py: grammar -> generated parser module (atomic write)
- lint.py: fail-fast quality gate over the source, test and build-script file-sets
- bundle.py: dual-target (full + minified) library bundling with staged output
- node_tests.py: headless test run with test-mode env and fixed file order
- browser.py: single-chunk browser test bundle + live-reload watch session
- coverage.py: instrumented test run with best-effort report writing
- watch.py: file-set watcher that re-triggers tasks
"""
