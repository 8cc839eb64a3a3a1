from .inference import infer, InferredType

__all__ = ["infer", "InferredType"]
