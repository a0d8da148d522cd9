"""Request and response models for LearnSphere."""
