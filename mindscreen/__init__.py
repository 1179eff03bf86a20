"""mindscreen - conversational depression-risk screening.

Turns free-text chat messages into structured clinical signals
(sentiment, risk tier, PHQ-9 estimate, behavioural cluster) and a
risk-stratified supportive response.
"""
