"""
Reporting functionality
"""

import logging
import logging.config
import sys

logging.config.dictConfig({
    'version'                  : 1,
    'disable_existing_loggers' : False,
    'formatters'               : {
        'standard' : {
            'format' : '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            'datefmt' : '%Y-%m-%dT%H:%M:%SZ'
        },
    },
    'handlers' : {
        'default' : {
            'level'     : 'DEBUG',
            'formatter' : 'standard',
            'class'     : 'logging.StreamHandler',
            'stream'    : 'ext://sys.stderr'
        }
    },
    'loggers' : {
        'fedifinger' : {
            'handlers'  : [ 'default' ],
            'level'     : 'WARNING',
            'propagate' : False
        }
    }
})
LOG = logging.getLogger( 'fedifinger' )

def set_reporting_level(n_verbose_flags: int) :
    if n_verbose_flags == 1:
        LOG.setLevel(logging.INFO)
    elif n_verbose_flags >= 2:
        LOG.setLevel(logging.DEBUG)
    else:
        LOG.setLevel(logging.WARNING)


def trace(*args):
    """
    Emit a trace message.

    args: the message or message components
    """
    if LOG.isEnabledFor(logging.DEBUG):
        LOG.debug(_construct_msg(True, args))


def info(*args):
    """
    Emit an info message.

    args: msg: the message or message components
    """
    if LOG.isEnabledFor(logging.INFO):
        LOG.info(_construct_msg(False, args))


def _construct_msg(with_loc, *args):
    """
    Construct a message from these arguments.

    with_loc: construct message with location info
    args: the message or message components
    return: string message
    """
    if with_loc:
        frame  = sys._getframe(2) # pylint: disable=protected-access
        ret = f'{ frame.f_code.co_filename }#{ frame.f_lineno } { frame.f_code.co_name }: '
    else:
        ret = ''

    def m(a):
        """
        Formats provided arguments into something suitable for log messages.
        """
        if a is None:
            return '<undef>'
        if isinstance(a, OSError):
            return type(a).__name__ + ' ' + str(a)
        return a

    ret += ' '.join(map(str, map(m, *args)))
    return ret
