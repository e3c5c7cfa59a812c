"""
Test suite for the SDK generator service.

Provides:
- Document analyzer and heuristic scorer tests
- Analysis engine retry and fallback tests
- Job orchestration and progress broadcasting tests
- HTTP and SSE endpoint tests
"""
