import discord
import os

from calcly.global_vars import TEMP_DIR


PACKAGE_FILEPATH = f"{TEMP_DIR}/msg.txt"

MAX_MSG_LEN = 2000


def get_flags(args, join=False, make_dic=False, no_args=None):
    if args is None:
        return [], []

    arg_list = args.split()
    flags = []
    not_flags = []
    flag_dic = {}
    no_args = [] if no_args is None else no_args

    while arg_list:
        arg = arg_list.pop(0)
        # A lone '-' or a negative number is an argument, not a flag
        if arg[0] == '-' and len(arg) > 1 and not arg[1].isdigit():
            if len(arg) == 2 and make_dic:
                flag_dic[arg[1]] = None if arg[1] in no_args or not arg_list else arg_list.pop(0)
            else:
                flags.extend([i.lower() for i in arg[1:]])
        else:
            not_flags.append(arg)

    if join:
        not_flags = ' '.join(not_flags)

    if make_dic:
        return flag_dic, not_flags

    return flags, not_flags

def make_temp_dir():
    if not os.path.isdir(TEMP_DIR):
        os.makedirs(TEMP_DIR)

# Sends obj to ctx, splitting or attaching it as a file when it is over Discord's message limit
async def package_message(obj, ctx, multi_send=False):
    if isinstance(obj, (int, float)):
        obj = str(obj)
    elif isinstance(obj, (list, set, tuple)):
        obj = '\n'.join([str(i) for i in obj])

    if len(obj) <= MAX_MSG_LEN:
        await ctx.send(obj)

        return

    if multi_send:
        i = 0
        while i < len(obj):
            chunk = obj[i:i + MAX_MSG_LEN]

            # Break on the last newline that fits, dropping the newline itself
            if i + MAX_MSG_LEN < len(obj) and (newline := chunk.rfind('\n')) > 0:
                chunk = chunk[:newline]
                i += 1

            await ctx.send(chunk)
            i += len(chunk)

        return

    make_temp_dir()
    with open(PACKAGE_FILEPATH, 'w', encoding='utf8') as msg_file:
        msg_file.write(obj)
    if os.path.exists(PACKAGE_FILEPATH):
        await ctx.send(file=discord.File(PACKAGE_FILEPATH))
        os.remove(PACKAGE_FILEPATH)
    else:
        print("Error occurred while packaging message. Temp file not created/deleted.")
