"""HTTP and WebSocket surface for LearnSphere."""
