"""
AI engine: commentary for analysis results and the AI coach.

Generative calls go through GeminiClient; responses are parsed with the
best-effort JSON extractor and guarded by a shared CommentaryGate (TTL cache +
sliding-window rate limiter). Every failure degrades to templated text.
"""
