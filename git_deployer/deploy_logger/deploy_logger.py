#!/usr/bin/env python3

"""
    This python file holds the logger handed to every part of a deploy. It is passed around explicitly instead of being
    configured once for the whole process, so two deploys can log to two different streams.
"""

import datetime
import sys

DEBUG_PREFIX = "DEBUG"
INFO_PREFIX = "INFO "
ERROR_PREFIX = "ERROR"


class DeployLogger():
    """
        Writes one timestamped line per message, prefixed with its level. Debug lines are only written when verbose.
    """
    def __init__(self, stream=None, verbose=False):

        self.stream = stream if stream is not None else sys.stdout
        self.verbose = verbose

    def debug(self, msg):

        if self.verbose:
            self._write(DEBUG_PREFIX, msg)

    def info(self, msg):
        self._write(INFO_PREFIX, msg)

    def error(self, msg):
        self._write(ERROR_PREFIX, msg)

    def _write(self, prefix, msg):
        """
            Writes the message with the current time and the level prefix. Multi line messages keep the prefix on every
            line so the output can still be grepped by level.

            :param str prefix: Level prefix.
            :param str msg: Message to write.
        """

        current_timestamp = datetime.datetime.now().strftime("%Y/%m/%d %H:%M:%S")

        for line in str(msg).splitlines() or [""]:
            self.stream.write("{} {} {}\n".format(current_timestamp, prefix, line))

        self.stream.flush()
