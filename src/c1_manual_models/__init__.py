from src.c1_manual_models.manual import Manual

__all__ = ["Manual"]
