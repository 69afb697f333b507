"""
API server package: HTTP interface over address collection and
transaction indexing. Thin request/response marshaling; all work is
delegated to the services built at startup.
"""
