"""Voice API components.

Call programs (NCCO) are built with :mod:`voice.ncco`; the REST client in
:mod:`voice.client` creates and controls calls that run them.
"""
