"""
Blind Story - a party game where each player answers one question blind and the
answers are stitched into a single sentence.
"""
