"""
Pydantic request and response models, one module per resource group, plus the
shared envelopes in `common` and the string enums in `enums`.
"""
