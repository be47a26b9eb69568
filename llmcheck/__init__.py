"""
LLM Check - AI Visibility Scanner

Measures how visible a website is inside AI assistants:
1. Asks ChatGPT, Gemini and Perplexity industry-specific questions
2. Detects brand/domain mentions in every answer
3. Scores each mention (prominence, sentiment, citation)
4. Caches scans and builds a visibility trend over time
"""

__version__ = "0.1.0"
