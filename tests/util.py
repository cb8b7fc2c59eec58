def hmmer_line(start, end, evalue, strand="d", te_type="Gypsy", length=None, score=50):
    length = end - start + 1 if length is None else length
    return (f"PREDIC---FROM--{start}---TO--{end}---LENGTH--{length}---EVALUE--{evalue}"
            f"---SCORE--{score}---SENSE--{strand}---TETYPE--{te_type}")


def rm_line(start, end, score, strand="d", te_type="Gypsy", repeat="Gypsy-1_AT-I", length=None):
    length = end - start + 1 if length is None else length
    return (f"PREDIC---FROM--{start}---TO--{end}---LENGTH--{length}---RMSCORE--{score}"
            f"---SENSE--{strand}---MATCHINGREPEAT--{repeat}---TETYPE--{te_type}")


def pred_file(*blocks):
    """blocks: (seq_id, [lines]) pairs -> .pred text"""
    out = []
    for seq_id, lines in blocks:
        out.append(f">>>SEQUENCE: {seq_id}")
        out.extend(lines)
        out.append("###")
    return "\n".join(out) + "\n"
