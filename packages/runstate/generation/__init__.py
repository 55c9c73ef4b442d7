"""
Generation module - seeded builders for everything a run rolls.

Contains:
- map: branching run map and its validation
- encounters: encounter selection with anti-repeat
- shop / rewards: offer tables and post-battle loot
- questions: math questions for gates, quizzes and the exam ladder
- weighted: rarity-weighted draws
"""
