"""
Services layer - business logic goes here.

Pipeline: grouping -> spike_detection -> event_assembler (via summarizer),
composed by event_synthesis. Insight services reuse the same pieces.
"""
