"""
Order-match trace decoder.

Reads the event logs an exchange contract emits for a matching round
(Trades, Cancel, CanceledIds, TriggeredIds, TopicTriggerAbove), decodes
their RLP payloads and narrates the orders involved.
"""

__version__ = "0.1.0"
