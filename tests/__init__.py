"""
LegFed Loader Tests

Test Organization:
- parsers/: record parsers and the header block
- conversion/: registry, policies, graph assembler and sinks
- converters/: one module per group of input formats, including Chado
- services/: PubMed lookups (Entrez mocked)
- cli/: the command line entrypoint

Running Tests:
    # Run all tests
    pytest tests/

    # Run only converter tests
    pytest tests/converters/
"""
