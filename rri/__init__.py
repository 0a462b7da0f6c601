"""
Registry-Registrar Interface (RRI) protocol engine shared by the client tools:
framing, query/response models, query documents and traffic censoring.
"""
