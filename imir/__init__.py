"""imir: metrics target catalogue normalization, discovery, and sync.

The package is organised by concern:

* :mod:`imir.targets` - catalogue models, normalization, validation,
  YAML persistence, and merging of discovered repositories.
* :mod:`imir.discovery` - discovery of candidate repositories through badge
  references and stargazers of the reference repository.
* :mod:`imir.github` - the minimal GitHub REST client used by discovery.
* :mod:`imir.retry` - retry with exponential backoff for fallible async calls.
"""
