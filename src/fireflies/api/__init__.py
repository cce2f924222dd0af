# FireFlies REST API layer
# Created: 2026-10-07
#
# Versioned endpoints under /api/v1/: the search/scrape/inference proxy and
# the chat surface built on top of it.
